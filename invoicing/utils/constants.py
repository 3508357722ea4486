"""
Setting key constants for the app_setting table.

Every value in app_setting is a string; callers own the conversion
(e.g. last_invoice_number is parsed as an integer by numbering_service).
"""

SETTING_KEYS = {
    # Shared admin password (seeded with DEFAULT_APP_PASSWORD on first login)
    'APP_PASSWORD': 'app_password',

    # The one valid session token; overwritten on every successful login
    'ACTIVE_SESSION': 'active_session',

    # Brand logo as a data:image/... URI
    'APP_LOGO': 'app_logo',

    # Highest invoice number issued so far
    'LAST_INVOICE_NUMBER': 'last_invoice_number',
}

# Header carrying the session token on protected requests
SESSION_HEADER = 'x-app-session'
