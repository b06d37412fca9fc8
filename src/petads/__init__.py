"""
petads: transactional data-access core of a pet-adoption classifieds marketplace.

    engine   = build_engine(settings)
    executor = QueryExecutor.from_settings(engine, settings)
    service  = MarketplaceService(executor, BcryptPasswordHasher.from_settings(settings))
"""
