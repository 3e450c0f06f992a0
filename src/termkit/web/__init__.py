"""Browser-based front end for termkit.

This package provides a Flask application that exposes termkit
sessions to a web page.  It is an **optional** extra — install with::

    pip install termkit[web]

The ``create_app`` factory in ``app.py`` builds a shell, opens a
``desktop`` and a ``mobile`` session on it, and serves the terminal
page plus a small JSON API per session.
"""
