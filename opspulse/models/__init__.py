"""
OpsPulse data model package.

The SQLAlchemy handle lives here so every model module (and the app
factory) shares one instance:

    from opspulse.models import db
"""

from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()
