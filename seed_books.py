# seed_books.py
import os

import requests

BASE_URL = os.getenv("BOOKSTORE_BASE_URL", "http://localhost:8080")

BOOKS = [
    {
        "isbn": "978-0441172719",
        "title": "Dune",
        "author": "Frank Herbert",
        "year": 1965,
        "price": 9.99,
    },
    {
        "isbn": "978-0132350884",
        "title": "Clean Code",
        "author": "Robert C. Martin",
        "year": 2008,
        "price": 37.50,
    },
    {
        "isbn": "978-0201616224",
        "title": "The Pragmatic Programmer",
        "author": "Andrew Hunt, David Thomas",
        "year": 1999,
        "price": 42.00,
    },
    {
        "isbn": "978-0131103627",
        "title": "The C Programming Language",
        "author": "Brian W. Kernighan, Dennis M. Ritchie",
        "year": 1988,
        "price": 55.25,
    },
    {
        "isbn": "978-1491950357",
        "title": "Designing Data-Intensive Applications",
        "author": "Martin Kleppmann",
        "year": 2017,
        "price": 48.90,
    },
    {
        "isbn": "978-0134494166",
        "title": "Clean Architecture",
        "author": "Robert C. Martin",
        "year": 2017,
        "price": 34.99,
    },
]


def check_service(url):
    """Hit /health and return True/False."""
    health_url = f"{url.rstrip('/')}/health"
    try:
        r = requests.get(health_url, timeout=3)
        print(f"[CHECK] {health_url} -> {r.status_code} {r.text.strip()}")
        return r.ok
    except requests.RequestException as e:
        print(f"[ERROR] service not reachable at {health_url}: {e}")
        return False


def seed_books(url):
    print(f"\n== Seeding books into {url} ==")
    created = 0
    for i, book in enumerate(BOOKS, start=1):
        try:
            resp = requests.post(f"{url.rstrip('/')}/api/v1/books", json=book, timeout=5)
        except requests.RequestException as e:
            print(f"  [{i:02}] {book['title']} -> FAILED: {e}")
            continue

        print(f"  [{i:02}] {book['title']} -> {resp.status_code}")
        if resp.status_code == 201:
            created += 1
        else:
            print(f"      Body: {resp.text.strip()}")
    return created


def main():
    print("Checking bookstore service...")
    if not check_service(BASE_URL):
        print(f"\nService is not healthy at {BASE_URL}, nothing to seed.")
        return

    created = seed_books(BASE_URL)

    print(f"\nDone, {created}/{len(BOOKS)} books created.")
    print("Try hitting:")
    print(f"  {BASE_URL}/api/v1/books")
    print(f"  {BASE_URL}/api/v1/books/new")


if __name__ == "__main__":
    main()
