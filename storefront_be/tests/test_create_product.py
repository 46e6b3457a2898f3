from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

FAILED = "Product addition failed. Please check the request data."


def _form(**overrides):
    data = {
        "name": "Desk lamp",
        "description": "Warm light",
        "price": "19.99",
        "category": "Home",
    }
    data.update(overrides)
    return {k: v for k, v in data.items() if v is not None}


def _images(*names):
    return [("prodimg", (n, b"\x89PNG fake", "image/png")) for n in names]


def test_create_product_stores_images_in_order(client, media_files):
    r = client.post("/api/prod/", data=_form(), files=_images("front.png", "back.png"))
    assert r.status_code == 200
    assert r.text == "Product added successfully"

    products = client.get("/api/prod/").json()
    assert len(products) == 1
    p = products[0]
    assert p["name"] == "Desk lamp"
    assert p["price"] == 19.99
    assert p["category"] == "Home"
    assert p["show"] is True
    assert len(p["img_urls"]) == 2
    assert all(name.endswith(".png") for name in p["img_urls"])
    assert p["img_url"] == ",".join(p["img_urls"])
    assert sorted(p["img_urls"]) == media_files()


def test_uploaded_image_is_served(client):
    client.post("/api/prod/", data=_form(), files=_images("a.png"))
    name = client.get("/api/prod/").json()[0]["img_urls"][0]
    r = client.get(f"/media/products/{name}")
    assert r.status_code == 200
    assert r.content == b"\x89PNG fake"


def test_hidden_flag_is_accepted(client):
    client.post("/api/prod/", data=_form(show="false"), files=_images("a.png"))
    assert client.get("/api/prod/").json()[0]["show"] is False


def test_out_of_set_category_is_rejected_before_storage(client, media_files):
    r = client.post("/api/prod/", data=_form(category="Toys"), files=_images("a.png"))
    assert r.status_code == 400
    assert r.text == FAILED
    assert client.get("/api/prod/").json() == []
    assert media_files() == []


def test_negative_price_is_rejected(client):
    r = client.post("/api/prod/", data=_form(price="-1"), files=_images("a.png"))
    assert r.status_code == 400
    assert client.get("/api/prod/").json() == []


def test_missing_name_is_rejected(client):
    r = client.post("/api/prod/", data=_form(name=None), files=_images("a.png"))
    assert r.status_code == 400
    assert r.text == FAILED


def test_at_least_one_image_is_required(client):
    r = client.post("/api/prod/", data=_form())
    assert r.status_code == 400
    assert r.text == FAILED


def test_too_many_images_are_rejected(client, media_files):
    r = client.post("/api/prod/", data=_form(), files=_images(*[f"{i}.png" for i in range(11)]))
    assert r.status_code == 400
    assert media_files() == []


def test_failed_commit_removes_saved_images(client, media_files, monkeypatch):
    def broken_commit(self):
        raise OperationalError("INSERT", {}, Exception("disk full"))

    monkeypatch.setattr(Session, "commit", broken_commit)
    r = client.post("/api/prod/", data=_form(), files=_images("a.png", "b.png"))
    assert r.status_code == 400
    assert r.text == FAILED
    assert media_files() == []
