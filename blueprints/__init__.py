"""
Blueprint registration for the dojo exam tracker.

All blueprints are registered without URL prefixes.
"""

from __future__ import annotations


def register_blueprints(app):
    from blueprints.exams import bp as exams_bp

    app.register_blueprint(exams_bp)
