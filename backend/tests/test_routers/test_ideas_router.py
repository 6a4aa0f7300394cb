"""Integration tests for ideas API endpoints."""

import repositories.db_models as db_models


class TestIdeasRouter:
    """Test cases for /api/ideas endpoints."""

    def test_list_ideas_unauthenticated(self, client, test_idea, pending_idea):
        """Anonymous callers only see public ideas."""
        response = client.get("/api/ideas/")

        assert response.status_code == 200
        data = response.json()
        assert [idea["id"] for idea in data] == [test_idea.id]
        assert data[0]["vote_count"] == 0
        assert data[0]["categories"][0]["name"] == "environment"

    def test_list_ideas_owner_sees_pending(
        self, client, auth_headers, test_idea, pending_idea
    ):
        response = client.get("/api/ideas/", headers=auth_headers)

        assert response.status_code == 200
        assert {idea["id"] for idea in response.json()} == {
            test_idea.id,
            pending_idea.id,
        }

    def test_list_ideas_filters_and_sort(self, client, make_idea, second_category):
        make_idea(title="Trees")
        clinic = make_idea(title="Clinic", categories=[second_category])

        response = client.get(
            "/api/ideas/", params={"category": "health", "sort": "popular"}
        )

        assert response.status_code == 200
        assert [idea["id"] for idea in response.json()] == [clinic.id]

    def test_list_ideas_unknown_category(self, client, test_idea):
        response = client.get("/api/ideas/", params={"category": "transport"})
        assert response.status_code == 404

    def test_list_ideas_invalid_sort(self, client):
        response = client.get("/api/ideas/", params={"sort": "random"})
        assert response.status_code == 422

    def test_list_ideas_limit_bounds(self, client):
        assert client.get("/api/ideas/", params={"limit": 0}).status_code == 422
        assert client.get("/api/ideas/", params={"limit": 101}).status_code == 422

    def test_list_mine_requires_auth(self, client):
        response = client.get("/api/ideas/", params={"mine": "true"})
        assert response.status_code == 403

    def test_create_idea_requires_auth(self, client, test_category):
        response = client.post(
            "/api/ideas/",
            json={"title": "Idea", "description": "Text", "categories": ["environment"]},
        )

        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Bearer"

    def test_create_idea_success(self, client, auth_headers, test_category):
        response = client.post(
            "/api/ideas/",
            headers=auth_headers,
            json={
                "title": "My Great Idea",
                "description": "A reading room in the old fire station.",
                "categories": ["environment"],
            },
        )

        assert response.status_code == 200
        data = response.json()
        assert data["title"] == "My Great Idea"
        assert data["status"] == "pending"
        assert data["author_username"] == "testuser"

    def test_create_idea_empty_title(self, client, auth_headers, test_category):
        response = client.post(
            "/api/ideas/",
            headers=auth_headers,
            json={"title": "   ", "description": "Text", "categories": []},
        )

        assert response.status_code == 422
        assert "correlation_id" in response.json()

    def test_create_idea_unknown_category(self, client, auth_headers, test_category):
        response = client.post(
            "/api/ideas/",
            headers=auth_headers,
            json={"title": "Idea", "description": "Text", "categories": ["nope"]},
        )
        assert response.status_code == 404

    def test_expired_token(self, client, expired_auth_headers, test_category):
        response = client.post(
            "/api/ideas/",
            headers=expired_auth_headers,
            json={"title": "Idea", "description": "Text", "categories": []},
        )

        assert response.status_code == 401
        assert "expired" in response.json()["detail"].lower()

    def test_get_hidden_idea_returns_404(self, client, other_auth_headers, pending_idea):
        response = client.get(f"/api/ideas/{pending_idea.id}", headers=other_auth_headers)
        assert response.status_code == 404

    def test_get_idea_includes_user_vote(
        self, client, other_auth_headers, test_idea
    ):
        client.put(
            f"/api/votes/{test_idea.id}", headers=other_auth_headers, json={"value": 1}
        )

        response = client.get(f"/api/ideas/{test_idea.id}", headers=other_auth_headers)

        assert response.status_code == 200
        assert response.json()["user_vote"] == 1
        assert response.json()["vote_count"] == 1

    def test_edit_pending_idea(self, client, auth_headers, pending_idea):
        response = client.patch(
            f"/api/ideas/{pending_idea.id}",
            headers=auth_headers,
            json={"description": "Now with a tool shed."},
        )

        assert response.status_code == 200
        assert response.json()["description"] == "Now with a tool shed."

    def test_edit_other_users_idea_forbidden(
        self, client, other_auth_headers, pending_idea
    ):
        response = client.patch(
            f"/api/ideas/{pending_idea.id}",
            headers=other_auth_headers,
            json={"title": "Mine now"},
        )
        assert response.status_code == 403

    def test_edit_approved_idea_forbidden(self, client, auth_headers, test_idea):
        response = client.patch(
            f"/api/ideas/{test_idea.id}", headers=auth_headers, json={"title": "Late"}
        )
        assert response.status_code == 403

    def test_delete_pending_idea(self, client, auth_headers, pending_idea):
        idea_id = pending_idea.id

        response = client.delete(f"/api/ideas/{idea_id}", headers=auth_headers)

        assert response.status_code == 200
        assert response.json() == {
            "message": "Idea deleted successfully",
            "idea_id": idea_id,
        }
        gone = client.get(f"/api/ideas/{idea_id}", headers=auth_headers)
        assert gone.status_code == 404

    def test_delete_approved_idea_forbidden(self, client, auth_headers, test_idea):
        response = client.delete(f"/api/ideas/{test_idea.id}", headers=auth_headers)
        assert response.status_code == 403


class TestModerationEndpoint:
    """Test cases for POST /api/ideas/{id}/status."""

    def test_moderator_approves(self, client, moderator_auth_headers, pending_idea):
        response = client.post(
            f"/api/ideas/{pending_idea.id}/status",
            headers=moderator_auth_headers,
            json={"status": "approved", "note": "Welcome"},
        )

        assert response.status_code == 200
        assert response.json()["status"] == "approved"
        assert response.json()["moderator_note"] == "Welcome"

    def test_non_moderator_forbidden(self, client, auth_headers, pending_idea):
        response = client.post(
            f"/api/ideas/{pending_idea.id}/status",
            headers=auth_headers,
            json={"status": "approved"},
        )
        assert response.status_code == 403

    def test_invalid_transition_conflict(
        self, client, moderator_auth_headers, test_idea
    ):
        response = client.post(
            f"/api/ideas/{test_idea.id}/status",
            headers=moderator_auth_headers,
            json={"status": "pending"},
        )
        assert response.status_code == 409

    def test_unknown_status_value(self, client, moderator_auth_headers, pending_idea):
        response = client.post(
            f"/api/ideas/{pending_idea.id}/status",
            headers=moderator_auth_headers,
            json={"status": "archived"},
        )
        assert response.status_code == 422

    def test_missing_idea(self, client, moderator_auth_headers):
        response = client.post(
            "/api/ideas/99999/status",
            headers=moderator_auth_headers,
            json={"status": "approved"},
        )
        assert response.status_code == 404

    def test_moderator_lists_pending_queue(
        self, client, moderator_auth_headers, pending_idea, test_idea
    ):
        response = client.get(
            "/api/ideas/",
            headers=moderator_auth_headers,
            params={"status": db_models.IdeaStatus.PENDING.value},
        )

        assert response.status_code == 200
        assert [idea["id"] for idea in response.json()] == [pending_idea.id]
