"""AfuSocial backend application."""
