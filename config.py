import os

basedir = os.path.abspath(os.path.dirname(__file__))


def _env_flag(name, default=False):
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'a-hard-to-guess-string'

    # Priority: Environment Variable -> Local SQLite
    db_url = os.environ.get('DATABASE_URL')
    if db_url and db_url.startswith("postgres://"):
        db_url = db_url.replace("postgres://", "postgresql://", 1)

    if db_url:
        SQLALCHEMY_DATABASE_URI = db_url
    else:
        SQLALCHEMY_DATABASE_URI = 'sqlite:///' + os.path.join(basedir, 'instance/app.db')

    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # All resource handlers hang off one function-style prefix
    FUNCTIONS_PREFIX = os.environ.get('FUNCTIONS_PREFIX', '/.netlify/functions')

    # Outbound email (Resend)
    RESEND_API_KEY = os.environ.get('RESEND_API_KEY')
    RESEND_FROM_EMAIL = os.environ.get('RESEND_FROM_EMAIL') or 'SmartHR <noreply@smarthr.com>'
    MAIL_SUPPRESS_SEND = _env_flag('MAIL_SUPPRESS_SEND')

    # Public base URL used for links embedded in emails
    APP_URL = os.environ.get('APP_URL') or os.environ.get('NEXT_PUBLIC_APP_URL') or 'http://localhost:3000'

    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')

    # Backend "no row" errors surface as 500 unless this is switched on
    NOT_FOUND_AS_404 = _env_flag('NOT_FOUND_AS_404')

    RESET_TOKEN_MAX_AGE = int(os.environ.get('RESET_TOKEN_MAX_AGE', 3600))


class TestConfig(Config):
    TESTING = True
    SECRET_KEY = 'test-secret'
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    MAIL_SUPPRESS_SEND = True
    RESEND_API_KEY = None
    APP_URL = 'http://testserver'
    LOG_LEVEL = 'WARNING'
    NOT_FOUND_AS_404 = False
