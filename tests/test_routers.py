from jose import jwt

API = "/api/v1"

APPLES = {
    "id": "prod-apple",
    "name": "Organic Apples",
    "image_url": "https://cdn.example.com/apples.jpg",
    "variants": [
        {"id": "apple-500g", "name": "500 g", "price": 100, "coop_price": 85, "stock": 5},
        {"id": "apple-1kg", "name": "1 kg", "price": 180, "coop_price": 150, "stock": 3},
    ],
}

ADDRESS = {
    "name": "Asha",
    "phone": "9876543210",
    "address_line1": "12 MG Road",
    "city": "Bengaluru",
    "state": "Karnataka",
    "pincode": "560001",
}


def bearer(sub: str) -> dict[str, str]:
    token = jwt.encode({"sub": sub}, "test-secret", algorithm="HS256")
    return {"Authorization": f"Bearer {token}"}


def test_health(client):
    assert client.get("/").json() == {"status": "ok", "service": "eversol-storefront"}


# ---- identity ----


def test_reads_without_identity_are_empty(client):
    res = client.get(f"{API}/wishlist")

    assert res.status_code == 200
    assert res.json()["data"] == {"items": [], "count": 0}


def test_writes_without_identity_are_rejected(client):
    res = client.post(f"{API}/wishlist", json={"product_id": "p1"})

    assert res.status_code == 401
    assert res.json() == {"success": False, "message": "Not available on server"}


def test_invalid_token_is_rejected(client):
    res = client.get(f"{API}/cart", headers={"Authorization": "Bearer not-a-jwt"})

    assert res.status_code == 401
    assert res.json()["success"] is False


def test_token_and_guest_state_are_separate(client, guest_headers):
    client.post(f"{API}/wishlist", json={"product_id": "p1"}, headers=bearer("u-1"))

    assert client.get(f"{API}/wishlist", headers=bearer("u-1")).json()["data"]["count"] == 1
    assert client.get(f"{API}/wishlist", headers=bearer("u-2")).json()["data"]["count"] == 0
    assert client.get(f"{API}/wishlist", headers=guest_headers).json()["data"]["count"] == 0


# ---- wishlist ----


def test_wishlist_flow(client, guest_headers):
    res = client.post(
        f"{API}/wishlist",
        json={"product_id": "p1", "title": "Forest Honey", "unknown_field": 1},
        headers=guest_headers,
    )
    assert res.status_code == 201
    assert res.json()["data"][0]["title"] == "Forest Honey"

    assert client.get(f"{API}/wishlist/p1", headers=guest_headers).json()["data"] == {"saved": True}

    res = client.post(f"{API}/wishlist/toggle", json={"product_id": "p1"}, headers=guest_headers)
    assert res.json()["data"] == {"saved": False}

    res = client.delete(f"{API}/wishlist/p1", headers=guest_headers)
    assert res.status_code == 404


def test_wishlist_share_link(client, guest_headers):
    client.post(f"{API}/wishlist", json={"product_id": "p1"}, headers=guest_headers)

    url = client.get(f"{API}/wishlist/share", headers=guest_headers).json()["url"]

    assert url.endswith("/wishlist?shared_wishlist=p1")


def test_wishlist_move_to_cart(client, guest_headers):
    client.post(f"{API}/wishlist", json={"product_id": "prod-apple"}, headers=guest_headers)

    res = client.post(
        f"{API}/wishlist/prod-apple/move-to-cart",
        json={"product": APPLES, "variant_id": "apple-500g"},
        headers=guest_headers,
    )

    assert res.status_code == 200
    assert res.json()["data"]["item_count"] == 1
    assert client.get(f"{API}/wishlist", headers=guest_headers).json()["data"]["count"] == 0


def test_wishlist_clear(client, guest_headers):
    client.post(f"{API}/wishlist", json={"product_id": "p1"}, headers=guest_headers)

    assert client.delete(f"{API}/wishlist", headers=guest_headers).json()["data"] == []


# ---- addresses ----


def test_address_flow(client, guest_headers):
    res = client.post(f"{API}/addresses", json=ADDRESS, headers=guest_headers)
    assert res.status_code == 201
    first = res.json()["data"]
    assert first["is_default"] is True

    second = client.post(
        f"{API}/addresses", json={**ADDRESS, "name": "Office"}, headers=guest_headers
    ).json()["data"]

    res = client.patch(
        f"{API}/addresses/{second['id']}", json={"city": "Mysuru"}, headers=guest_headers
    )
    assert res.json()["data"]["city"] == "Mysuru"

    res = client.put(f"{API}/addresses/{second['id']}/select", headers=guest_headers)
    assert res.json()["data"]["id"] == second["id"]

    listed = client.get(f"{API}/addresses", headers=guest_headers).json()["data"]
    assert [a["id"] for a in listed] == [second["id"], first["id"]]

    assert client.delete(f"{API}/addresses/{second['id']}", headers=guest_headers).status_code == 200
    selected = client.get(f"{API}/addresses/selected", headers=guest_headers).json()["data"]
    assert selected["id"] == first["id"]


def test_address_validation(client, guest_headers):
    res = client.post(f"{API}/addresses", json={**ADDRESS, "name": " "}, headers=guest_headers)
    assert res.status_code == 422

    res = client.patch(f"{API}/addresses/addr_missing", json={"city": "Pune"}, headers=guest_headers)
    assert res.status_code == 404
    assert res.json()["message"] == "Address not found"


# ---- cart ----


def test_cart_flow(client, guest_headers):
    client.put(f"{API}/cart/membership", json={"is_coop_member": True}, headers=guest_headers)

    res = client.post(
        f"{API}/cart/items",
        json={"product": APPLES, "variant_id": "apple-500g", "quantity": 2},
        headers=guest_headers,
    )
    assert res.status_code == 200
    assert res.json()["data"]["subtotal"] == 170

    cart = client.post(
        f"{API}/cart/discount", json={"code": "save10"}, headers=guest_headers
    ).json()["data"]
    assert cart["discount"] == {"code": "SAVE10", "amount": 17}
    assert cart["total"] == round(153 + cart["tax"], 2)

    line_id = cart["items"][0]["id"]
    cart = client.patch(
        f"{API}/cart/items/{line_id}", json={"quantity": 0}, headers=guest_headers
    ).json()["data"]
    assert cart["items"] == []

    cart = client.delete(f"{API}/cart", headers=guest_headers).json()["data"]
    assert cart["is_coop_member"] is True


def test_cart_errors(client, guest_headers):
    res = client.post(
        f"{API}/cart/items",
        json={"product": APPLES, "variant_id": "apple-1kg", "quantity": 4},
        headers=guest_headers,
    )
    assert res.status_code == 409

    res = client.post(
        f"{API}/cart/items",
        json={"product": APPLES, "variant_id": "apple-2kg"},
        headers=guest_headers,
    )
    assert res.status_code == 404

    res = client.post(f"{API}/cart/discount", json={"code": "NOPE"}, headers=guest_headers)
    assert res.status_code == 404
    assert res.json()["message"] == "Invalid coupon code"


# ---- pincode ----


def test_pincode_details(client):
    res = client.get(f"{API}/pincode/560001")

    assert res.status_code == 200
    assert res.json()["data"]["city"] == "Bengaluru"


def test_pincode_error_envelope(client):
    res = client.get(f"{API}/pincode/800001/availability")

    assert res.status_code == 422
    body = res.json()
    assert body["success"] is False
    assert body["type"] == "NotServiceable"
    assert "Patna" in body["message"]

    assert client.get(f"{API}/pincode/012345").status_code == 400
    assert client.get(f"{API}/pincode/999999").status_code == 404


def test_pincode_resolve_address(client):
    res = client.get(f"{API}/pincode/400001/address")

    assert res.json()["data"] == {"city": "Mumbai", "state": "Maharashtra"}


def test_saved_pincode(client, guest_headers):
    assert client.get(f"{API}/pincode/saved", headers=guest_headers).json() == {"pincode": None}

    res = client.put(f"{API}/pincode/saved", json={"pincode": "560038"}, headers=guest_headers)

    assert res.json() == {"pincode": "560038"}


def test_detect_location(client):
    res = client.post(f"{API}/pincode/detect", json={"latitude": 12.97, "longitude": 77.59})
    assert res.json() == {"pincode": "560001"}

    res = client.post(f"{API}/pincode/detect", json={"error_code": 1})
    assert res.status_code == 403
    assert res.json()["type"] == "GeolocationPermission"

    res = client.post(f"{API}/pincode/detect", json={})
    assert res.status_code == 503


# ---- products ----


def test_product_query(client):
    products = [
        {"id": str(i), "name": f"Honey {i}", "category": "Honey", "price": i * 10,
         "created_at": "2025-01-01T00:00:00"}
        for i in range(1, 6)
    ]

    res = client.post(
        f"{API}/products/query",
        json={
            "products": products,
            "filters": {"sort_by": "price-high-to-low", "price_range": [20, 40]},
            "page": 1,
            "page_size": 2,
        },
    )

    body = res.json()
    assert res.status_code == 200
    assert [p["id"] for p in body["products"]] == ["4", "3"]
    assert body["total_products"] == 3
    assert body["total_pages"] == 2
    assert body["active_filters"] == 1


def test_move_to_cart_requires_matching_product(client, guest_headers):
    client.post(f"{API}/wishlist", json={"product_id": "prod-honey"}, headers=guest_headers)

    res = client.post(
        f"{API}/wishlist/prod-honey/move-to-cart",
        json={"product": APPLES, "variant_id": "apple-500g"},
        headers=guest_headers,
    )

    assert res.status_code == 400
    assert client.get(f"{API}/wishlist/prod-honey", headers=guest_headers).json()["data"] == {"saved": True}
    assert client.get(f"{API}/cart", headers=guest_headers).json()["data"]["items"] == []


def test_address_patch_with_null_required_field_keeps_book(client, guest_headers):
    first = client.post(f"{API}/addresses", json=ADDRESS, headers=guest_headers).json()["data"]
    client.post(f"{API}/addresses", json={**ADDRESS, "name": "Office"}, headers=guest_headers)

    res = client.patch(f"{API}/addresses/{first['id']}", json={"name": None}, headers=guest_headers)

    assert res.status_code == 422
    listed = client.get(f"{API}/addresses", headers=guest_headers).json()["data"]
    assert len(listed) == 2
    assert listed[0]["name"] == "Asha"


def test_product_query_with_mixed_timestamps(client):
    products = [
        {"id": "old", "name": "Ghee", "category": "Dairy", "price": 10, "created_at": "2024-01-01T00:00:00"},
        {"id": "new", "name": "Honey", "category": "Honey", "price": 10, "created_at": "2024-02-01T00:00:00Z"},
    ]

    res = client.post(
        f"{API}/products/query",
        json={"products": products, "filters": {"sort_by": "newest"}},
    )

    assert res.status_code == 200
    assert [p["id"] for p in res.json()["products"]] == ["new", "old"]
