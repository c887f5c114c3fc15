"""Error handlers for the application (JSON only)."""
from flask import jsonify
from werkzeug.exceptions import HTTPException

from realm_services.core.exceptions import ResourceError


def register_error_handlers(app):
    """Register error handlers with the Flask app."""

    @app.errorhandler(ResourceError)
    def handle_resource_error(error: ResourceError):
        """Render typed resource errors with their own status."""
        if error.status >= 500:
            app.logger.error(f"Resource error: {error.message}", exc_info=error.cause or error)
        return jsonify(error.to_dict()), error.status

    @app.errorhandler(400)
    def bad_request(error):
        """Handle 400 Bad Request errors."""
        return jsonify({"code": 400, "reason": "Bad Request", "message": _description(error)}), 400

    @app.errorhandler(401)
    def unauthorized(error):
        """Handle 401 Unauthorized errors."""
        return jsonify({"code": 401, "reason": "Unauthorized", "message": "Authentication required"}), 401

    @app.errorhandler(404)
    def not_found(error):
        """Handle 404 Not Found errors."""
        return jsonify({"code": 404, "reason": "Not Found", "message": "Resource not found"}), 404

    @app.errorhandler(405)
    def method_not_allowed(error):
        """Handle 405 Method Not Allowed errors."""
        return jsonify({"code": 405, "reason": "Method Not Allowed", "message": _description(error)}), 405

    @app.errorhandler(500)
    def internal_error(error):
        """Handle 500 Internal Server Error."""
        # ALWAYS log the full error (even in production) - logs are secure
        app.logger.error(f"Internal error: {error}", exc_info=True)
        return jsonify({
            "code": 500,
            "reason": "Internal Server Error",
            "message": "An unexpected error occurred",
        }), 500

    @app.errorhandler(Exception)
    def handle_exception(error):
        """Handle uncaught exceptions."""
        # Pass through HTTP errors
        if isinstance(error, HTTPException):
            return error

        app.logger.error(f"Unhandled exception: {error}", exc_info=True)
        return jsonify({
            "code": 500,
            "reason": "Internal Server Error",
            "message": "An unexpected error occurred",
        }), 500


def _description(error) -> str:
    return getattr(error, "description", None) or str(error)
