# tests/v1/test_categories.py
"""Tests for the category endpoints."""

from fastapi import status


def test_create_and_list_categories(client):
    created = client.post("/api/v1/categories/", json={"title": "Science"})
    client.post("/api/v1/categories/", json={"title": "Art"})
    listed = client.get("/api/v1/categories/")

    assert created.status_code == status.HTTP_201_CREATED
    assert created.json()["title"] == "Science"
    assert [c["title"] for c in listed.json()] == ["Art", "Science"]


def test_duplicate_category(client, category):
    response = client.post("/api/v1/categories/", json={"title": category.title})

    assert response.status_code == status.HTTP_409_CONFLICT
    detail = response.json()["detail"]
    assert detail["kind"] == "duplicate_resource"
    assert detail["resource"] == "category"


def test_empty_category_title(client):
    response = client.post("/api/v1/categories/", json={"title": ""})

    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
    detail = response.json()["detail"]
    assert detail["kind"] == "validation_error"
    assert detail["field"] == "title"
