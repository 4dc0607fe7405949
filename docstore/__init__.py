from flask import Flask
from .config import Config
from .extensions import cors, init_store


def create_app(config_class: type[Config] = Config, **overrides):
    app = Flask(__name__)
    app.config.from_object(config_class)
    app.config.update(overrides)
    app.logger.setLevel(app.config["LOG_LEVEL"])
    # stored documents keep their field order
    app.json.sort_keys = False

    # Extensions
    cors.init_app(
        app,
        origins=app.config["CORS_ORIGINS"],
        methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type"],
        supports_credentials=True,
    )

    # Storage and formats
    init_store(app)

    # Blueprints
    from .routes.api import bp as api

    app.register_blueprint(api)

    return app
