"""API tests for library endpoints."""

import asyncio
from typing import Any, Dict, List

import pytest
from httpx import AsyncClient


class TestBookAPI:
    """API tests for the book catalogue."""

    @pytest.mark.asyncio
    async def test_add_book_success(self, client: AsyncClient):
        """Test successful book creation."""
        book_data = {
            "title": "Gödel, Escher, Bach",
            "author": "Douglas Hofstadter",
            "isbn": "978-0465026562",
            "category": "Philosophy",
        }

        response = await client.post("/library/books", json=book_data)

        assert response.status_code == 201
        data = response.json()
        assert data["title"] == book_data["title"]
        assert data["isbn"] == book_data["isbn"]
        assert data["available"] is True
        assert data["borrowedBy"] is None
        assert data["borrower"] is None
        assert "id" in data

    @pytest.mark.asyncio
    async def test_add_book_minimal_data(self, client: AsyncClient):
        """Only title and author are required."""
        response = await client.post("/library/books", json={"title": "Zine", "author": "Anon"})

        assert response.status_code == 201
        assert response.json()["isbn"] is None
        assert response.json()["category"] is None

    @pytest.mark.asyncio
    async def test_add_book_validation_errors(self, client: AsyncClient):
        """Missing title or author is rejected."""
        response = await client.post("/library/books", json={"author": "Anon"})
        assert response.status_code == 422

        response = await client.post("/library/books", json={"title": "Zine"})
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_add_book_duplicate_isbn(self, client: AsyncClient, test_book: Dict[str, Any]):
        """A catalogued ISBN cannot be added twice."""
        response = await client.post(
            "/library/books", json={"title": "Copy", "author": "Someone", "isbn": test_book["isbn"]}
        )
        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_add_sample_books(self, client: AsyncClient):
        """The sample catalogue is added once."""
        response = await client.post("/library/books/sample")
        assert response.status_code == 201
        assert len(response.json()) == 5

        response = await client.post("/library/books/sample")
        assert response.json() == []

    @pytest.mark.asyncio
    async def test_list_books(self, client: AsyncClient, test_books: List[Dict[str, Any]]):
        """Every book is listed."""
        response = await client.get("/library/books")

        assert response.status_code == 200
        assert [book["id"] for book in response.json()] == [book["id"] for book in test_books]

    @pytest.mark.asyncio
    async def test_get_book_not_found(self, client: AsyncClient):
        """Unknown ids are 404."""
        response = await client.get("/library/books/99999")
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_books_by_category(self, client: AsyncClient, test_books: List[Dict[str, Any]]):
        """Category match is exact."""
        response = await client.get("/library/category/Mathematics")

        assert response.status_code == 200
        assert [book["title"] for book in response.json()] == ["Linear Algebra Done Right"]


class TestLendingAPI:
    """API tests for borrowing and returning books."""

    @pytest.mark.asyncio
    async def test_borrow_and_return(
        self, client: AsyncClient, test_book: Dict[str, Any], test_student: Dict[str, Any]
    ):
        """A full loan cycle."""
        response = await client.post(
            "/library/borrow", json={"bookId": test_book["id"], "studentId": test_student["id"], "days": 10}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["available"] is False
        assert data["borrowedBy"] == test_student["id"]
        assert data["borrower"]["name"] == test_student["name"]
        assert data["borrowDate"] is not None
        assert data["dueDate"] is not None

        borrowed = await client.get("/library/borrowed")
        assert [book["id"] for book in borrowed.json()] == [test_book["id"]]
        assert (await client.get("/library/available")).json() == []

        response = await client.post("/library/return", json={"bookId": test_book["id"]})

        assert response.status_code == 200
        data = response.json()
        assert data["available"] is True
        assert data["borrowedBy"] is None
        assert data["borrowDate"] is None
        assert data["dueDate"] is None

    @pytest.mark.asyncio
    async def test_borrow_already_borrowed(
        self, client: AsyncClient, test_book: Dict[str, Any], test_students: List[Dict[str, Any]]
    ):
        """Borrowing a lent book is a conflict."""
        first = {"bookId": test_book["id"], "studentId": test_students[0]["id"]}
        second = {"bookId": test_book["id"], "studentId": test_students[1]["id"]}

        assert (await client.post("/library/borrow", json=first)).status_code == 200
        response = await client.post("/library/borrow", json=second)

        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_borrow_not_found(
        self, client: AsyncClient, test_book: Dict[str, Any], test_student: Dict[str, Any]
    ):
        """Unknown books or students are 404."""
        response = await client.post("/library/borrow", json={"bookId": 99999, "studentId": test_student["id"]})
        assert response.status_code == 404

        response = await client.post("/library/borrow", json={"bookId": test_book["id"], "studentId": 99999})
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_borrow_invalid_days(
        self, client: AsyncClient, test_book: Dict[str, Any], test_student: Dict[str, Any]
    ):
        """Loan length must be between 1 and 90 days."""
        for days in (0, 91):
            response = await client.post(
                "/library/borrow", json={"bookId": test_book["id"], "studentId": test_student["id"], "days": days}
            )
            assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_concurrent_borrows(
        self, client: AsyncClient, test_book: Dict[str, Any], test_students: List[Dict[str, Any]]
    ):
        """Of two simultaneous borrow requests exactly one is granted."""
        responses = await asyncio.gather(
            client.post("/library/borrow", json={"bookId": test_book["id"], "studentId": test_students[0]["id"]}),
            client.post("/library/borrow", json={"bookId": test_book["id"], "studentId": test_students[1]["id"]}),
        )

        assert sorted(response.status_code for response in responses) == [200, 409]

    @pytest.mark.asyncio
    async def test_return_not_found(self, client: AsyncClient):
        """Returning an unknown book is 404."""
        response = await client.post("/library/return", json={"bookId": 99999})
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_huge_ids(self, client: AsyncClient, test_book: Dict[str, Any], test_student: Dict[str, Any]):
        """Ids beyond the integer range are rejected or not found, never a server error."""
        huge = 2**70

        assert (await client.get(f"/library/books/{huge}")).status_code == 404

        response = await client.post("/library/borrow", json={"bookId": huge, "studentId": test_student["id"]})
        assert response.status_code == 422

        response = await client.post("/library/borrow", json={"bookId": test_book["id"], "studentId": huge})
        assert response.status_code == 422

        assert (await client.post("/library/return", json={"bookId": huge})).status_code == 422
