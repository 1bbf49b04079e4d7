import os

from flask import Flask, jsonify, session

from config import Config
from extensions import init_extensions, login_manager
from logger import configure_app_logging
from models import AdminUser


def create_app(config_class=Config):
    app = Flask(__name__)
    app.config.from_object(config_class)

    if not app.debug and not app.testing:
        app.config.update(
            SESSION_COOKIE_SECURE=True,
            SESSION_COOKIE_HTTPONLY=True,
            REMEMBER_COOKIE_SECURE=True,
            REMEMBER_COOKIE_HTTPONLY=True,
        )

    # ------------------------------------------------------------------------------------------
    # LOGGING
    # ------------------------------------------------------------------------------------------
    configure_app_logging(app)

    # ------------------------------------------------------------------------------------------
    # Initialize extensions
    # ------------------------------------------------------------------------------------------
    init_extensions(app)

    # ------------------------------------------------------------------------------------------
    # Register blueprints
    # ------------------------------------------------------------------------------------------
    def register_blueprints(app):
        from blueprints.admin import admin_bp
        from blueprints.auth import bp as auth_bp
        from blueprints.banners import bp as banners_bp
        from blueprints.coins import bp as coins_bp
        from blueprints.kyc import bp as kyc_bp
        from blueprints.mining import bp as mining_bp
        from blueprints.notifications import bp as notifications_bp
        from blueprints.payments import bp as payments_bp
        from blueprints.promo_codes import bp as promo_codes_bp
        from blueprints.referrals import bp as referrals_bp
        from blueprints.settings import bp as settings_bp
        from blueprints.users import bp as users_bp

        for blueprint in (auth_bp, admin_bp, users_bp, kyc_bp, payments_bp, mining_bp, referrals_bp,
                          coins_bp, notifications_bp, banners_bp, promo_codes_bp, settings_bp):
            app.register_blueprint(blueprint)

    register_blueprints(app)

    # ------------------------------------------------------------------------------------------
    # Flask-Login: the operator lives in the session next to the API token
    # ------------------------------------------------------------------------------------------
    @login_manager.user_loader
    def load_user(user_id):
        admin = session.get("admin_user")
        if not admin or not session.get("admin_token"):
            return None
        user = AdminUser.from_payload(admin)
        return user if user.id == str(user_id) else None

    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify({"success": False, "message": "Please log in to access the admin console"}), 401

    @app.route("/healthz")
    def healthz():
        return {"status": "ok"}, 200

    return app


if __name__ == "__main__":
    app = create_app()
    port = int(os.environ.get("PORT", 5000))
    app.run(debug=app.config.get("DEBUG", False), host="0.0.0.0", port=port)
