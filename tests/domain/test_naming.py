"""Tests for task naming."""

from stageguard.domain.naming import (
    FALLBACK_SLUG,
    MAX_SLUG_LENGTH,
    ensure_unique_task_name,
    slugify_objective,
)


class TestSlugifyObjective:
    """Tests for slugify_objective."""

    def test_reference_objective(self) -> None:
        assert (
            slugify_objective("Build a user authentication system with JWT")
            == "build-a-user-authentication-system-with-jwt"
        )

    def test_punctuation_is_stripped(self) -> None:
        assert slugify_objective("Add OAuth2.0 (Google) login!") == "add-oauth20-google-login"

    def test_hyphen_runs_collapse(self) -> None:
        assert slugify_objective("fix  --  the   bug") == "fix-the-bug"

    def test_length_is_capped(self) -> None:
        slug = slugify_objective("word " * 40)

        assert len(slug) <= MAX_SLUG_LENGTH

    def test_non_ascii_only_objective_falls_back(self) -> None:
        assert slugify_objective("构建用户认证系统") == FALLBACK_SLUG

    def test_empty_objective_falls_back(self) -> None:
        assert slugify_objective("") == FALLBACK_SLUG


class TestEnsureUniqueTaskName:
    """Tests for ensure_unique_task_name."""

    def test_free_name_unchanged(self) -> None:
        assert ensure_unique_task_name("auth", lambda name: False) == "auth"

    def test_suffixes_until_free(self) -> None:
        taken = {"auth", "auth-1", "auth-2"}

        assert ensure_unique_task_name("auth", taken.__contains__) == "auth-3"
