import logging

from flask import Flask

from ecdsa_zkp.config import default_artifact_dir
from ecdsa_zkp.loader import default_store

from verify_routes import api_bp


def create_app(artifact_dir=None, store=None):
    app = Flask(__name__)
    app.config["ARTIFACT_DIR"] = artifact_dir or default_artifact_dir()
    app.config["KEY_STORE"] = store or default_store
    app.register_blueprint(api_bp)
    return app


app = create_app()


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app.run(debug=False)
