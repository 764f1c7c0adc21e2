"""Constants and helpers shared by the test modules."""

TEST_BUCKET_NAME = "filestore-test"

PNG_CONTENT = b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR\x00\x00\x00\x01\x00\x00\x00\x01"
PDF_CONTENT = b"%PDF-1.4\n1 0 obj\n<<>>\nendobj\ntrailer\n<</Root 1 0 R>>\n%%EOF"


def auth(token: str) -> dict:
    return {"authorization": token}


def upload(client, user_id, token, filename, content, content_type, comment="a test file."):
    return client.post(
        f"/api/users/{user_id}/files",
        headers=auth(token),
        files={"file": (filename, content, content_type)},
        data={"comment": comment},
    )
