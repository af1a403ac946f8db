def test_list_products_returns_seed_newest_first(client):
    res = client.get("/api/products")
    assert res.status_code == 200
    body = res.json()
    assert body["total"] == 3
    assert [it["id"] for it in body["items"]] == ["prod_3", "prod_2", "prod_1"]
    first = body["items"][0]
    assert first["createdAt"] == "2024-01-20T09:00:00.000Z"
    assert first["imageUrl"].startswith("https://picsum.photos/seed/prod_3")


def test_get_product(client):
    res = client.get("/api/products/prod_2")
    assert res.status_code == 200
    assert res.json()["name"] == "The Ultimate Productivity Course"


def test_get_missing_product_404(client):
    res = client.get("/api/products/nope")
    assert res.status_code == 404
