"""
HTTP layer for the PR reviewer service.

The application object lives in ``web.app``; import it from there so that
importing routers or error handlers does not build the app.
"""
