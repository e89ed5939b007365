"""
Dish catalog service.

Serves paginated listings, search, ingredient matching and filtering over a
fixed dish collection, behind bcrypt-backed accounts and signed bearer tokens.
"""
