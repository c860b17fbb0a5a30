from beacon.config.settings import Settings, load_settings, parse_cors_origins  # noqa: F401
