"""Tests for the pure project scanners (core/project_scan.py)."""

from __future__ import annotations

from pathlib import PurePosixPath

import pytest

from aiqa.core.models import PlannedTest, ProjectAnalysis, ProjectManifests
from aiqa.core.project_scan import (
    analyze_files,
    detect_frameworks,
    is_source_file,
    is_test_file,
    normalize_requirement,
    plan_tests,
    render_skeleton,
)


# ---------------------------------------------------------------------------
# Requirement parsing
# ---------------------------------------------------------------------------

class TestNormalizeRequirement:
    @pytest.mark.parametrize(
        ("line", "expected"),
        [
            ("Django>=4.2", "django"),
            ("pytest_asyncio==0.23  # async tests", "pytest-asyncio"),
            ("fastapi[all]", "fastapi"),
            ("  requests ; python_version > '3.8'", "requests"),
        ],
    )
    def test_names(self, line: str, expected: str) -> None:
        assert normalize_requirement(line) == expected

    @pytest.mark.parametrize("line", ["", "   ", "# comment", "-r base.txt", "--index-url x"])
    def test_ignored_lines(self, line: str) -> None:
        assert normalize_requirement(line) is None


# ---------------------------------------------------------------------------
# Framework detection
# ---------------------------------------------------------------------------

class TestDetectFrameworks:
    def test_javascript_project(self) -> None:
        report = detect_frameworks(
            ProjectManifests(
                npm_dependencies=frozenset({"next", "react", "vitest", "@playwright/test"}),
                sources=("package.json",),
            )
        )
        assert report.frameworks == ("Next.js", "React")
        assert report.test_runners == ("Playwright", "Vitest")
        assert report.languages == ("javascript",)
        assert report.manifests == ("package.json",)

    def test_typescript_is_detected(self) -> None:
        report = detect_frameworks(
            ProjectManifests(npm_dependencies=frozenset({"typescript"}), sources=("package.json",))
        )
        assert report.languages == ("typescript",)

    def test_python_project(self) -> None:
        report = detect_frameworks(
            ProjectManifests(
                python_dependencies=frozenset({"fastapi", "pytest"}),
                sources=("pyproject.toml", "requirements.txt"),
            )
        )
        assert report.frameworks == ("FastAPI",)
        assert report.test_runners == ("pytest",)
        assert report.languages == ("python",)
        assert report.manifests == ("pyproject.toml", "requirements.txt")

    def test_nothing_detected(self) -> None:
        report = detect_frameworks(ProjectManifests(sources=("requirements.txt",)))
        assert report.frameworks == ()
        assert report.test_runners == ()
        assert report.languages == ("python",)


# ---------------------------------------------------------------------------
# File classification
# ---------------------------------------------------------------------------

class TestFileClassification:
    @pytest.mark.parametrize(
        "path",
        [
            "tests/test_utils.py",
            "pkg/utils_test.py",
            "src/Button.test.tsx",
            "src/api.spec.ts",
            "src/__tests__/Button.jsx",
            "e2e/login.ts",
        ],
    )
    def test_test_files(self, path: str) -> None:
        assert is_test_file(PurePosixPath(path))
        assert not is_source_file(PurePosixPath(path))

    @pytest.mark.parametrize("path", ["src/pkg/utils.py", "src/Button.tsx", "lib/index.mjs"])
    def test_source_files(self, path: str) -> None:
        assert is_source_file(PurePosixPath(path))

    @pytest.mark.parametrize(
        "path",
        [
            "src/pkg/__init__.py",
            "setup.py",
            "types/global.d.ts",
            "vite.config.ts",
            "README.md",
            "styles/app.css",
        ],
    )
    def test_ignored_files(self, path: str) -> None:
        assert not is_source_file(PurePosixPath(path))


# ---------------------------------------------------------------------------
# Analysis
# ---------------------------------------------------------------------------

class TestAnalyzeFiles:
    def test_untested_sources(self) -> None:
        analysis = analyze_files(
            [
                "src/pkg/utils.py",
                "src/pkg/models.py",
                "src/pkg/__init__.py",
                "tests/test_utils.py",
                "web/Button.tsx",
                "web/Button.test.tsx",
                "web/Header.tsx",
            ]
        )
        assert analysis.source_files == (
            "src/pkg/models.py",
            "src/pkg/utils.py",
            "web/Button.tsx",
            "web/Header.tsx",
        )
        assert analysis.test_files == ("tests/test_utils.py", "web/Button.test.tsx")
        assert analysis.untested_files == ("src/pkg/models.py", "web/Header.tsx")
        assert analysis.coverage_ratio == 0.5

    def test_matching_is_case_insensitive(self) -> None:
        analysis = analyze_files(["src/Button.tsx", "src/button.spec.tsx"])
        assert analysis.untested_files == ()
        assert analysis.coverage_ratio == 1.0

    def test_empty_project(self) -> None:
        analysis = analyze_files([])
        assert analysis == ProjectAnalysis((), (), ())
        assert analysis.coverage_ratio == 1.0

    def test_same_name_in_other_package_stays_untested(self) -> None:
        analysis = analyze_files(["pkg_a/utils.py", "pkg_b/utils.py", "tests/pkg_a/test_utils.py"])
        assert analysis.untested_files == ("pkg_b/utils.py",)

    def test_mirrored_test_dirs_under_src_layout(self) -> None:
        analysis = analyze_files(
            [
                "src/a/utils.py",
                "src/b/utils.py",
                "tests/unit/a/test_utils.py",
                "tests/unit/b/test_utils.py",
            ]
        )
        assert analysis.untested_files == ()

    def test_ambiguous_flat_test_covers_nothing(self) -> None:
        analysis = analyze_files(["pkg_a/utils.py", "pkg_b/utils.py", "tests/test_utils.py"])
        assert analysis.untested_files == ("pkg_a/utils.py", "pkg_b/utils.py")

    def test_colocated_js_test_covers_its_neighbour_only(self) -> None:
        analysis = analyze_files(
            ["web/a/index.ts", "web/b/index.ts", "web/a/index.test.ts"]
        )
        assert analysis.untested_files == ("web/b/index.ts",)


# ---------------------------------------------------------------------------
# Planning and skeletons
# ---------------------------------------------------------------------------

class TestPlanTests:
    ANALYSIS = ProjectAnalysis(
        source_files=("src/pkg/models.py", "web/Header.tsx", "web/util.js"),
        test_files=(),
        untested_files=("src/pkg/models.py", "web/Header.tsx", "web/util.js"),
    )

    def test_targets_per_language(self) -> None:
        assert plan_tests(self.ANALYSIS) == (
            PlannedTest("src/pkg/models.py", "tests/test_models.py", "python"),
            PlannedTest("web/Header.tsx", "web/Header.test.tsx", "typescript"),
            PlannedTest("web/util.js", "web/util.test.js", "javascript"),
        )

    def test_limit(self) -> None:
        planned = plan_tests(self.ANALYSIS, limit=1)
        assert [entry.source for entry in planned] == ["src/pkg/models.py"]

    def test_same_stem_sources_get_distinct_targets(self) -> None:
        planned = plan_tests(analyze_files(["pkg_a/utils.py", "pkg_b/utils.py"]))
        assert [entry.target for entry in planned] == [
            "tests/pkg_a/test_utils.py",
            "tests/pkg_b/test_utils.py",
        ]

    def test_src_prefix_is_dropped_from_mirrored_targets(self) -> None:
        planned = plan_tests(analyze_files(["src/a/utils.py", "src/b/utils.py", "src/b/models.py"]))
        assert [entry.target for entry in planned] == [
            "tests/a/test_utils.py",
            "tests/test_models.py",
            "tests/b/test_utils.py",
        ]

    def test_colliding_mirror_falls_back_to_full_path(self) -> None:
        planned = plan_tests(analyze_files(["a/utils.py", "src/a/utils.py"]))
        assert [entry.target for entry in planned] == [
            "tests/a/test_utils.py",
            "tests/src/a/test_utils.py",
        ]

    def test_generated_targets_cover_their_sources(self) -> None:
        sources = ["pkg_a/utils.py", "pkg_b/utils.py"]
        planned = plan_tests(analyze_files(sources))
        after = analyze_files([*sources, *(entry.target for entry in planned)])
        assert after.untested_files == ()


class TestRenderSkeleton:
    def test_python_skeleton_is_skipped_test(self) -> None:
        text = render_skeleton(PlannedTest("src/pkg/my-module.py", "tests/test_my-module.py", "python"))
        assert "import pytest" in text
        assert '@pytest.mark.skip(reason="generated skeleton")' in text
        assert "def test_my_module() -> None:" in text
        compile(text, "skeleton.py", "exec")

    def test_javascript_skeleton(self) -> None:
        text = render_skeleton(PlannedTest("web/Header.tsx", "web/Header.test.tsx", "typescript"))
        assert text.startswith('describe("Header", () => {')
        assert 'it.todo("covers web/Header.tsx");' in text
