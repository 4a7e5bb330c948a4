"""Account management service: registration, login and account CRUD behind bearer tokens."""
