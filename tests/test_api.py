import json

from fastapi.testclient import TestClient

from app.main import create_app


class TestScriptRoutes:
    def test_root_listing(self, client):
        response = client.get("/")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/plain")
        assert response.headers["cache-control"] == "public, max-age=3600"
        assert "protect-branches: Protect main/master" in response.text

    def test_script(self, client):
        response = client.get("/protect-branches")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/x-shellscript")
        assert response.headers["cache-control"] == "no-cache"
        assert response.headers["x-content-type-options"] == "nosniff"
        assert response.headers["x-frame-options"] == "DENY"
        assert response.headers["x-script-name"] == "protect-branches"
        assert "nix-shell -p gh parallel jq" in response.text

    def test_script_uppercase(self, client):
        response = client.get("/PROTECT-BRANCHES")

        assert response.status_code == 200
        assert response.headers["x-script-name"] == "protect-branches"

    def test_invalid_names(self, client):
        for path in ["/protect-branches.sh", "/a/b"]:
            response = client.get(path)
            assert response.status_code == 400
            assert response.text == "Invalid script name"

    def test_unknown_script(self, client):
        response = client.get("/unknown")

        assert response.status_code == 404
        assert response.headers["content-type"].startswith("text/plain")
        assert "Available scripts:\nprotect-branches\nhello_world" in response.text

    def test_post_not_allowed(self, client):
        assert client.post("/protect-branches").status_code == 405


class TestJsonApi:
    def test_list_scripts(self, client):
        response = client.get("/api/scripts")

        assert response.status_code == 200
        assert response.json()[0] == {
            "name": "protect-branches",
            "description": "Protect main/master branches in all public repositories",
            "path": "protect-branches.sh",
            "packages": ["gh", "parallel", "jq"],
            "url": "https://raw.githubusercontent.com/aloshy-ai/scripts/main/protect-branches.sh",
        }
        assert [s["name"] for s in response.json()] == ["protect-branches", "hello_world"]

    def test_get_script(self, client):
        response = client.get("/api/scripts/Hello_World")

        assert response.status_code == 200
        assert response.json()["url"].endswith("/tools/hello.sh")

    def test_get_unknown_script(self, client):
        response = client.get("/api/scripts/nope")

        assert response.status_code == 404
        assert response.json() == {
            "error": "Script 'nope' not found",
            "available": ["protect-branches", "hello_world"],
        }

    def test_get_invalid_script(self, client):
        response = client.get("/api/scripts/a.sh")

        assert response.status_code == 400
        assert response.json()["error"] == "Invalid script name"


class TestRegistryLoading:
    def test_registry_file_from_settings(self, settings, tmp_path):
        path = tmp_path / "registry.json"
        path.write_text(json.dumps({"only-one": {"path": "one.sh", "packages": ["jq"]}}))
        settings = settings.model_copy(update={"registry_file": path})

        with TestClient(create_app(settings)) as client:
            assert client.get("/unknown").text.endswith("Available scripts:\nonly-one")

    def test_default_discovers_bundled_scripts(self, settings):
        with TestClient(create_app(settings)) as client:
            assert client.get("/protect-branches").status_code == 200
