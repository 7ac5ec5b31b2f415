PROJECT = {
    "title": "Portfolio API",
    "description": "Backend for the portfolio site",
    "shortDescription": "FastAPI backend",
    "technologies": ["Python", "FastAPI"],
    "links": {"github": "https://github.com/example/portfolio-api"},
    "images": [{"url": "/uploads/image-1.png", "alt": "home", "isPrimary": True}],
    "startDate": "2024-02-01",
}

SKILL = {
    "name": "Python",
    "category": "languages",
    "proficiency": 90,
    "yearsOfExperience": 5,
}

CERTIFICATE = {
    "title": "Cloud Developer",
    "issuer": "Cloud Inc",
    "issueDate": "2020-01-01",
    "expiryDate": "2021-01-01",
    "credentialUrl": "https://example.com/cred/1",
    "skills": ["AWS"],
}


def _create(client, headers, path, body, **overrides):
    r = client.post(path, headers=headers, json={**body, **overrides})
    assert r.status_code == 201, r.text
    return r.json()["data"]


# ---- projects ----

def test_project_crud(client, admin_headers):
    project = _create(client, admin_headers, "/api/portfolio/projects", PROJECT)["project"]
    assert project["shortDescription"] == "FastAPI backend"
    assert project["category"] == "web" and project["status"] == "completed"
    assert project["images"][0]["isPrimary"] is True
    assert project["links"]["github"] == "https://github.com/example/portfolio-api"

    r = client.get(f"/api/portfolio/projects/{project['id']}")
    assert r.status_code == 200
    assert r.json()["data"]["project"]["title"] == "Portfolio API"

    r = client.put(f"/api/portfolio/projects/{project['id']}", headers=admin_headers,
                   json={"priority": 5, "title": None, "client": "ACME"})
    assert r.status_code == 200
    updated = r.json()["data"]["project"]
    assert updated["priority"] == 5
    assert updated["title"] == "Portfolio API"
    assert updated["client"] == "ACME"

    r = client.delete(f"/api/portfolio/projects/{project['id']}", headers=admin_headers)
    assert r.status_code == 200
    r = client.get(f"/api/portfolio/projects/{project['id']}")
    assert r.status_code == 404
    assert r.json() == {"status": "error", "message": "Project not found"}


def test_project_validation(client, admin_headers):
    r = client.post("/api/portfolio/projects", headers=admin_headers,
                    json={**PROJECT, "technologies": [], "category": "spaceship"})
    assert r.status_code == 422
    body = r.json()
    assert body["status"] == "error" and body["message"] == "Validation failed"
    fields = {e["field"] for e in body["errors"]}
    assert {"technologies", "category"} <= fields

    r = client.post("/api/portfolio/projects", headers=admin_headers,
                    json={**PROJECT, "links": {"live": "not a url"}})
    assert r.status_code == 422


def test_public_listing_hides_private_projects(client, admin_headers):
    _create(client, admin_headers, "/api/portfolio/projects", PROJECT, title="Public A", featured=True)
    _create(client, admin_headers, "/api/portfolio/projects", PROJECT, title="Public B")
    _create(client, admin_headers, "/api/portfolio/projects", PROJECT, title="Hidden", isPublic=False)

    r = client.get("/api/portfolio/projects")
    data = r.json()["data"]
    assert {p["title"] for p in data["projects"]} == {"Public A", "Public B"}
    assert data["pagination"]["total"] == 2

    r = client.get("/api/portfolio/projects?featured=true")
    assert [p["title"] for p in r.json()["data"]["projects"]] == ["Public A"]

    r = client.get("/api/portfolio/featured")
    assert [p["title"] for p in r.json()["data"]["projects"]] == ["Public A"]

    r = client.get("/api/portfolio/admin/projects", headers=admin_headers)
    assert r.json()["data"]["pagination"]["total"] == 3


def test_unknown_enum_value_matches_nothing(client, admin_headers):
    _create(client, admin_headers, "/api/portfolio/projects", PROJECT)
    r = client.get("/api/portfolio/projects?category=spaceship")
    assert r.status_code == 200
    assert r.json()["data"]["projects"] == []


def test_huge_page_returns_empty_listing(client, admin_headers):
    _create(client, admin_headers, "/api/portfolio/projects", PROJECT)
    r = client.get("/api/portfolio/projects?page=99999999999999999999")
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["projects"] == []
    assert data["pagination"]["total"] == 1
    assert data["pagination"]["hasPrev"] is True
    assert data["pagination"]["hasNext"] is False


# ---- skills ----

def test_skills_grouping_and_duplicates(client, admin_headers):
    _create(client, admin_headers, "/api/skills", SKILL, featured=True, priority=5)
    _create(client, admin_headers, "/api/skills", SKILL, name="SQL", category="database")
    _create(client, admin_headers, "/api/skills", SKILL, name="Hidden", isActive=False)

    r = client.post("/api/skills", headers=admin_headers, json=SKILL)
    assert r.status_code == 400
    assert r.json()["message"] == "Skill with this name already exists"

    data = client.get("/api/skills").json()["data"]
    assert [s["name"] for s in data["skills"]] == ["Python", "SQL"]
    assert set(data["groupedSkills"]) == {"languages", "database"}
    assert data["totalCount"] == 2

    r = client.get("/api/skills/category/database")
    assert r.json()["data"]["count"] == 1

    r = client.get("/api/skills/featured")
    assert [s["name"] for s in r.json()["data"]["skills"]] == ["Python"]


def test_skill_rejects_bad_color(client, admin_headers):
    r = client.post("/api/skills", headers=admin_headers, json={**SKILL, "color": "blue"})
    assert r.status_code == 422


def test_skill_update_and_delete(client, admin_headers):
    skill = _create(client, admin_headers, "/api/skills", SKILL)["skill"]
    r = client.put(f"/api/skills/{skill['id']}", headers=admin_headers, json={"proficiency": 95})
    assert r.json()["data"]["skill"]["proficiency"] == 95
    r = client.delete(f"/api/skills/{skill['id']}", headers=admin_headers)
    assert r.status_code == 200
    r = client.delete(f"/api/skills/{skill['id']}", headers=admin_headers)
    assert r.status_code == 404
    assert r.json()["message"] == "Skill not found"


# ---- certificates ----

def test_certificate_expiry_and_filters(client, admin_headers):
    cert = _create(client, admin_headers, "/api/certificates", CERTIFICATE, level="advanced")
    assert cert["certificate"]["isExpired"] is True
    assert cert["certificate"]["issueDate"] == "2020-01-01"

    _create(client, admin_headers, "/api/certificates", CERTIFICATE, title="No expiry",
            expiryDate=None, featured=True)

    r = client.get("/api/certificates?level=advanced")
    assert [c["title"] for c in r.json()["data"]["certificates"]] == ["Cloud Developer"]

    r = client.get("/api/certificates/featured")
    certs = r.json()["data"]["certificates"]
    assert [c["title"] for c in certs] == ["No expiry"]
    assert certs[0]["isExpired"] is False


def test_certificate_skill_length(client, admin_headers):
    r = client.post("/api/certificates", headers=admin_headers,
                    json={**CERTIFICATE, "skills": ["x" * 51]})
    assert r.status_code == 422


# ---- profile ----

def test_profile_empty_then_upsert(client, admin_headers):
    r = client.get("/api/profile")
    assert r.status_code == 200
    assert r.json()["data"]["name"] == ""
    assert r.json()["data"]["contactDescription"] == ""

    r = client.put("/api/profile", headers=admin_headers,
                   json={"name": "Ada", "email": "Ada@Example.com", "github": "https://github.com/ada"})
    assert r.status_code == 200
    first = r.json()["data"]
    assert first["email"] == "ada@example.com"

    r = client.put("/api/profile", headers=admin_headers, json={"title": "Engineer", "github": ""})
    second = r.json()["data"]
    assert second["id"] == first["id"]
    assert second["name"] == "Ada" and second["title"] == "Engineer"
    assert second["github"] == ""

    assert client.get("/api/profile").json()["data"]["title"] == "Engineer"


# ---- contact ----

def test_contact_inbox(client, admin_headers):
    r = client.post("/api/contact", json={"name": "Visitor", "email": "v@example.com",
                                          "message": "Hello there"})
    assert r.status_code == 201
    assert r.json()["message"] == "Your message has been sent successfully!"

    r = client.post("/api/contact", json={"name": "Visitor", "email": "bad", "message": "x"})
    assert r.status_code == 422

    r = client.get("/api/contact", headers=admin_headers)
    messages = r.json()["data"]
    assert len(messages) == 1 and messages[0]["read"] is False

    mid = messages[0]["id"]
    r = client.patch(f"/api/contact/{mid}/read", headers=admin_headers)
    assert r.json()["data"]["read"] is True

    r = client.get("/api/contact?read=false", headers=admin_headers)
    assert r.json()["data"] == []

    assert client.delete(f"/api/contact/{mid}", headers=admin_headers).status_code == 200
    r = client.delete(f"/api/contact/{mid}", headers=admin_headers)
    assert r.status_code == 404
    assert r.json()["message"] == "Message not found"
