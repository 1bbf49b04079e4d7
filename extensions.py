from flask_login import LoginManager


login_manager = LoginManager()


def init_extensions(app):
    """Initialize Flask extensions"""
    login_manager.init_app(app)
    login_manager.login_view = "auth.login"
    login_manager.login_message_category = "info"

    return app
