ROLE_USER = "USER"
ROLE_SUPER_ADMIN = "SUPER_ADMIN"
ROLES = (ROLE_USER, ROLE_SUPER_ADMIN)

SUPPORTED_CURRENCIES = ("USD", "EUR", "GBP", "JPY", "CAD", "AUD")

MS_PER_SECOND = 1000
SECONDS_PER_HOUR = 3600
