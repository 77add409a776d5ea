"""Preocupaciones transversales: config, logging, errores, métricas, middlewares."""
