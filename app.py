import os
import logging
from dotenv import load_dotenv
load_dotenv()
from flask import Flask, jsonify
from flask_cors import CORS
from config import config_dict, ProdConfig
from extensions import mail, migrate
from models import db
from routes.students import student_bp
from routes.professors import professor_bp
from scoring.errors import ScoringError
from utils.logging_config import configure_logging

logger = logging.getLogger(__name__)


def create_app(config_name=None):
    configure_logging()

    app = Flask(__name__)

    env = config_name or os.environ.get("FLASK_ENV", "production")
    app.config.from_object(config_dict.get(env, ProdConfig))
    logger.info("Environment: %s", env)

    CORS(app, resources={r"/api/*": {"origins": app.config["CORS_ORIGINS"], "supports_credentials": True}})

    db.init_app(app)
    mail.init_app(app)
    migrate.init_app(app, db)

    app.register_blueprint(student_bp, url_prefix='/api/student')
    app.register_blueprint(professor_bp, url_prefix='/api/professor')

    @app.route('/')
    def home():
        return "Welcome to the LMS scoring service!"

    @app.errorhandler(ScoringError)
    def handle_scoring_error(error):
        logger.warning("Rejected %s: %s", error.error_code, error.message)
        return jsonify(error.to_dict()), error.status_code

    return app


if __name__ == '__main__':
    app = create_app()
    app.run(debug=app.config['DEBUG'])
