def test_create_book_stamps_owner_and_timestamps(client, make_user, make_book):
    ada_id, ada = make_user("Ada")
    book = make_book(ada)
    assert book["added_by"] == ada_id
    assert book["created_at"] == book["updated_at"]

    detail = client.get(f"/api/v1/books/{book['id']}").json()
    assert detail["owner_name"] == "Ada"
    assert detail["average_rating"] == 0
    assert detail["star_rating"] == 0
    assert detail["review_count"] == 0
    assert detail["reviews"] == []


def test_create_book_for_someone_else_is_refused(client, make_user):
    bob_id, _ = make_user("Bob")
    _, ada = make_user("Ada")
    resp = client.post(
        "/api/v1/books/",
        json={
            "title": "Dune",
            "author": "Frank Herbert",
            "description": "Spice.",
            "genre": "Science Fiction",
            "published_year": 1965,
            "added_by": bob_id,
        },
        headers=ada,
    )
    assert resp.status_code == 403


def test_create_book_validation(client, make_user):
    _, ada = make_user("Ada")
    base = {
        "title": "Dune",
        "author": "Frank Herbert",
        "description": "Spice.",
        "genre": "Science Fiction",
        "published_year": 1965,
    }
    for override in ({"title": "   "}, {"genre": ""}, {"published_year": 999}, {"published_year": 3000}):
        resp = client.post("/api/v1/books/", json={**base, **override}, headers=ada)
        assert resp.status_code == 422, override
    assert client.get("/api/v1/books/").json()["total"] == 0


def test_only_owner_can_update_or_delete(client, make_user, make_book):
    _, ada = make_user("Ada")
    _, bob = make_user("Bob")
    book = make_book(ada)

    assert client.put(f"/api/v1/books/{book['id']}", json={"title": "Mine"}, headers=bob).status_code == 403
    assert client.delete(f"/api/v1/books/{book['id']}", headers=bob).status_code == 403
    assert client.get(f"/api/v1/books/{book['id']}").json()["title"] == "The Hobbit"

    updated = client.put(f"/api/v1/books/{book['id']}", json={"title": "The Hobbit (Annotated)"}, headers=ada)
    assert updated.status_code == 200
    assert updated.json()["title"] == "The Hobbit (Annotated)"

    assert client.delete(f"/api/v1/books/{book['id']}", headers=ada).status_code == 204
    assert client.get(f"/api/v1/books/{book['id']}").status_code == 404


def test_update_refreshes_updated_at_only(client, make_user, make_book):
    _, ada = make_user("Ada")
    book = make_book(ada)
    # Same values still count as a mutation.
    resp = client.put(f"/api/v1/books/{book['id']}", json={"genre": "Fantasy"}, headers=ada)
    body = resp.json()
    assert body["created_at"] == book["created_at"]
    assert body["updated_at"] > book["updated_at"]


def test_owner_cannot_be_changed(client, make_user, make_book):
    ada_id, ada = make_user("Ada")
    bob_id, _ = make_user("Bob")
    book = make_book(ada)
    resp = client.put(f"/api/v1/books/{book['id']}", json={"added_by": bob_id}, headers=ada)
    assert resp.status_code == 403
    same = client.put(f"/api/v1/books/{book['id']}", json={"added_by": ada_id, "title": "X"}, headers=ada)
    assert same.status_code == 200


def test_missing_book_is_not_found(client, make_user):
    _, ada = make_user("Ada")
    assert client.get("/api/v1/books/nope").status_code == 404
    assert client.put("/api/v1/books/nope", json={"title": "X"}, headers=ada).status_code == 404
    assert client.delete("/api/v1/books/nope", headers=ada).status_code == 404


def test_pagination_beyond_last_page(client, make_user, make_book):
    _, ada = make_user("Ada")
    for i in range(12):
        make_book(ada, title=f"Book {i:02d}")

    page3 = client.get("/api/v1/books/", params={"page": 3}).json()
    assert len(page3["items"]) == 2
    assert page3["total"] == 12
    assert page3["total_pages"] == 3
    assert page3["page_size"] == 5

    page4 = client.get("/api/v1/books/", params={"page": 4}).json()
    assert page4["items"] == []
    assert page4["total"] == 12

    far = client.get("/api/v1/books/", params={"page": 2 * 10**18})
    assert far.status_code == 200
    assert far.json()["items"] == []
    assert far.json()["total"] == 12

    assert client.get("/api/v1/books/", params={"page": 0}).status_code == 422


def test_pages_do_not_overlap(client, make_user, make_book):
    _, ada = make_user("Ada")
    for i in range(12):
        make_book(ada, title=f"Book {i:02d}")
    seen = []
    for page in (1, 2, 3):
        seen.extend(b["id"] for b in client.get("/api/v1/books/", params={"page": page}).json()["items"])
    assert len(seen) == len(set(seen)) == 12


def test_search_matches_title_or_author_substring(client, make_user, make_book):
    _, ada = make_user("Ada")
    make_book(ada)
    make_book(ada, title="Dune", author="Frank Herbert", genre="Science Fiction", published_year=1965)

    titles = [b["title"] for b in client.get("/api/v1/books/", params={"q": "tolk"}).json()["items"]]
    assert titles == ["The Hobbit"]
    titles = [b["title"] for b in client.get("/api/v1/books/", params={"q": "UNE"}).json()["items"]]
    assert titles == ["Dune"]
    # Wildcards are matched literally.
    assert client.get("/api/v1/books/", params={"q": "%"}).json()["total"] == 0


def test_genre_filter_and_enumeration(client, make_user, make_book):
    _, ada = make_user("Ada")
    make_book(ada)
    make_book(ada, title="Dune", author="Frank Herbert", genre="Science Fiction", published_year=1965)
    make_book(ada, title="The Silmarillion", genre="Fantasy", published_year=1977)

    assert client.get("/api/v1/books/genres").json() == ["Fantasy", "Science Fiction"]
    body = client.get("/api/v1/books/", params={"genre": "Fantasy"}).json()
    assert body["total"] == 2
    assert {b["genre"] for b in body["items"]} == {"Fantasy"}


def test_sort_orders(client, make_user, make_book):
    _, ada = make_user("Ada")
    first = make_book(ada, title="First", published_year=1990)
    second = make_book(ada, title="Second", published_year=2010)
    third = make_book(ada, title="Third", published_year=1950)

    def ids(sort):
        return [b["id"] for b in client.get("/api/v1/books/", params={"sort": sort}).json()["items"]]

    assert ids("newest") == [third["id"], second["id"], first["id"]]
    assert ids("oldest") == [first["id"], second["id"], third["id"]]
    assert ids("year") == [second["id"], first["id"], third["id"]]
    assert ids("by-year-desc") == ids("year")
    assert client.get("/api/v1/books/", params={"sort": "title"}).status_code == 422


def test_same_timestamp_ties_break_on_id(client, clock, make_user, make_book):
    _, ada = make_user("Ada")
    clock.frozen = True
    created = sorted(make_book(ada, title=f"Twin {i}")["id"] for i in range(3))
    for sort in ("newest", "oldest"):
        listed = [b["id"] for b in client.get("/api/v1/books/", params={"sort": sort}).json()["items"]]
        assert listed == created


def test_listing_includes_owner_and_rating(client, make_user, make_book):
    _, ada = make_user("Ada")
    _, bob = make_user("Bob")
    book = make_book(ada)
    client.post("/api/v1/reviews", json={"book_id": book["id"], "rating": 5, "review_text": "Great"}, headers=ada)
    client.post("/api/v1/reviews", json={"book_id": book["id"], "rating": 4, "review_text": "Good"}, headers=bob)

    item = client.get("/api/v1/books/").json()["items"][0]
    assert item["owner_name"] == "Ada"
    assert item["review_count"] == 2
    assert item["average_rating"] == 4.5


def test_deleting_book_cascades_to_reviews(client, make_user, make_book):
    _, ada = make_user("Ada")
    _, bob = make_user("Bob")
    book = make_book(ada)
    review = client.post(
        "/api/v1/reviews", json={"book_id": book["id"], "rating": 3, "review_text": "Fine"}, headers=bob
    ).json()

    assert client.delete(f"/api/v1/books/{book['id']}", headers=ada).status_code == 204
    assert client.get(f"/api/v1/reviews/{review['id']}").status_code == 404
    assert client.get(f"/api/v1/books/{book['id']}/reviews").status_code == 404
    bob_summary = client.get(f"/api/v1/profiles/{review['user_id']}/summary").json()
    assert bob_summary["review_count"] == 0
    assert client.get("/api/v1/books/").json()["total"] == 0
