from claude_cloud import validators


def test_required() -> None:
    check = validators.required("GitHub username")
    assert check("alice") is None
    assert check("   ") == "GitHub username is required"


def test_email() -> None:
    assert validators.email("a@example.com") is None
    assert validators.email("nope") == "Valid email is required"


def test_figma_url() -> None:
    assert validators.figma_url("https://www.figma.com/file/abc") is None
    assert validators.figma_url("https://example.com") == "Must be a valid Figma URL"


def test_optional_accepts_blank() -> None:
    assert validators.optional("") is None
