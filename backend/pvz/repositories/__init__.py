"""
Entity store: persistence functions for pickup points, receptions and products.

Every function takes the session as its first argument so it runs inside the
caller's unit of work. Lookups that can legitimately find nothing return None;
storage failures propagate as SQLAlchemy exceptions.
"""
