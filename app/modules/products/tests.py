"""
Tests for the catalogue: clients, products with stock moves, services.
"""

from decimal import Decimal


class TestClientsAPI:

    def test_crud(self, client, auth_headers):
        response = client.post("/api/clients/", json={
            "name": "  Marie Curie ", "address": "1 rue Pierre et Marie Curie", "phone": "0102030405"
        }, headers=auth_headers)
        assert response.status_code == 201
        customer = response.json()
        assert customer["name"] == "Marie Curie"

        response = client.put(f"/api/clients/{customer['id']}", json={"phone": "0607080910"}, headers=auth_headers)
        assert response.json()["phone"] == "0607080910"
        assert response.json()["address"] == "1 rue Pierre et Marie Curie"

        assert client.get("/api/clients/", headers=auth_headers).json()["total"] == 1
        assert client.delete(f"/api/clients/{customer['id']}", headers=auth_headers).status_code == 200
        assert client.get(f"/api/clients/{customer['id']}", headers=auth_headers).status_code == 404

    def test_blank_fields_rejected(self, client, auth_headers):
        response = client.post("/api/clients/", json={
            "name": "   ", "address": "x", "phone": "y"
        }, headers=auth_headers)
        assert response.status_code == 422


class TestProductsAPI:

    def test_create_and_move_stock(self, client, auth_headers):
        response = client.post("/api/produits/", json={"name": "Filtre à huile", "price": 12.5, "stock": 2}, headers=auth_headers)
        assert response.status_code == 201
        product_id = response.json()["id"]

        response = client.put(f"/api/produits/{product_id}/retirer", json={"quantite": 2}, headers=auth_headers)
        assert response.json()["stock"] == 0
        assert response.json()["is_out_of_stock"] is True

        out = client.get("/api/produits/rupture", headers=auth_headers).json()
        assert [p["id"] for p in out] == [product_id]

        response = client.put(f"/api/produits/{product_id}/ajouter", json={"quantity": 5}, headers=auth_headers)
        assert response.json()["stock"] == 5
        assert client.get("/api/produits/rupture", headers=auth_headers).json() == []

    def test_negative_price_rejected(self, client, auth_headers):
        response = client.post("/api/produits/", json={"name": "X", "price": -1}, headers=auth_headers)
        assert response.status_code == 422

    def test_stock_move_must_be_positive(self, client, auth_headers, sample_product):
        response = client.put(f"/api/produits/{sample_product.id}/retirer", json={"quantity": 0}, headers=auth_headers)
        assert response.status_code == 422

    def test_partial_update(self, client, auth_headers, sample_product):
        response = client.put(f"/api/produits/{sample_product.id}", json={"price": 55}, headers=auth_headers)
        assert Decimal(str(response.json()["price"])) == Decimal("55")
        assert response.json()["name"] == sample_product.name


class TestServicesAPI:

    def test_crud(self, client, auth_headers):
        response = client.post("/api/services/", json={"name": "Vidange", "price": 40}, headers=auth_headers)
        assert response.status_code == 201
        service_id = response.json()["id"]

        response = client.put(f"/api/services/{service_id}", json={"name": "Vidange complète", "price": 60}, headers=auth_headers)
        assert response.json()["name"] == "Vidange complète"

        assert client.get("/api/services/", headers=auth_headers).json()["total"] == 1
        assert client.delete(f"/api/services/{service_id}", headers=auth_headers).status_code == 200

    def test_price_must_be_positive(self, client, auth_headers):
        response = client.post("/api/services/", json={"name": "Gratuit", "price": 0}, headers=auth_headers)
        assert response.status_code == 422
