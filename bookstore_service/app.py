import logging
import sys

from flask import Flask, jsonify, request
from flask_cors import CORS
from werkzeug.exceptions import BadRequest, HTTPException

from .config import Config
from .db import ConnectionManager
from .errors import BadRequestError, BookstoreError, FatalStartupError, StoreError
from .payloads import book_to_dict, matches_search, parse_book_payload
from .repository import BookRepository

logger = logging.getLogger(__name__)


def create_app(config=Config, manager=None):
    """
    Build the Flask app around an explicitly owned ConnectionManager.

    The caller owns the manager's lifecycle (initialize / shutdown); when
    none is passed one is built from ``config`` but not connected.
    """
    app = Flask(__name__)
    app.config.from_object(config)

    # Permissive CORS for the frontend dev server. Not for production.
    CORS(
        app,
        supports_credentials=True,
        methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Origin", "Content-Type", "Accept", "Authorization"],
        max_age=12 * 60 * 60,
    )

    if manager is None:
        manager = ConnectionManager.from_config(config)
    books = BookRepository(manager)
    app.extensions["bookstore"] = {"manager": manager, "books": books}

    # ---------------------------------------------------------
    # Errors
    # ---------------------------------------------------------

    @app.errorhandler(BookstoreError)
    def handle_bookstore_error(err):
        return jsonify({"error": err.message}), err.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(err):
        return jsonify({"error": err.description}), err.code

    @app.after_request
    def log_request(response):
        logger.info("%s %s -> %s", request.method, request.path, response.status_code)
        return response

    def read_book_payload():
        try:
            data = request.get_json(force=True)
        except BadRequest as e:
            raise BadRequestError("request body is not valid JSON") from e
        return parse_book_payload(data)

    # ---------------------------------------------------------
    # Health
    # ---------------------------------------------------------

    @app.get("/health")
    def health():
        try:
            manager.ping()
        except StoreError as e:
            return jsonify({"message": "Unhealthy", "error": e.message}), 503
        return jsonify({"message": "healthy"}), 200

    # ---------------------------------------------------------
    # Books
    # ---------------------------------------------------------

    @app.get("/api/v1/books")
    def list_books():
        """
        All books. ``?search=`` filters by title/author substring
        (case-insensitive) after the rows are fetched.
        """
        result = books.list_all()
        term = request.args.get("search")
        if term:
            result = [b for b in result if matches_search(b, term)]
        return jsonify([book_to_dict(b) for b in result])

    @app.get("/api/v1/books/new")
    def list_new_books():
        recent = books.list_recent(app.config["RECENT_BOOKS_LIMIT"])
        return jsonify([book_to_dict(b) for b in recent])

    @app.get("/api/v1/books/<int:book_id>")
    def get_book(book_id):
        return jsonify(book_to_dict(books.get(book_id)))

    @app.post("/api/v1/books")
    def create_book():
        book = books.create(read_book_payload())
        return jsonify(book_to_dict(book)), 201

    @app.put("/api/v1/books/<int:book_id>")
    def update_book(book_id):
        book = books.update(book_id, read_book_payload())
        return jsonify(book_to_dict(book)), 200

    @app.delete("/api/v1/books/<int:book_id>")
    def delete_book(book_id):
        books.delete(book_id)
        return jsonify({"message": "book deleted successfully"}), 200

    return app


def main(config=Config):
    logging.basicConfig(level=logging.INFO)

    manager = ConnectionManager.from_config(config)
    try:
        try:
            manager.initialize(
                attempts=config.DB_CONNECT_ATTEMPTS,
                delay=config.DB_CONNECT_DELAY,
            )
            manager.create_schema()
        except (FatalStartupError, StoreError) as e:
            logger.error("Startup failed, not serving traffic: %s", e)
            sys.exit(1)

        app = create_app(config, manager)
        logger.info("Server starting on :%d", config.PORT)
        app.run(host="0.0.0.0", port=config.PORT, threaded=True)
    finally:
        manager.shutdown()


if __name__ == "__main__":
    main()
