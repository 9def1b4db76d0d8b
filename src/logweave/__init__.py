"""
logweave: declarative composition of logging pipelines.

One logger, an ordered chain of handlers, an ordered chain of processors,
assembled from tagged component declarations at composition time.

Usage:
    from logweave.composition import compose

    result = compose({"handlers": {"10": "logweave.logger.handlers.StreamHandler"}},
                     parameters={"appDir": "/srv/app/app"})
    log = result.logger
    log.info("ready")
"""
