"""Tests for the Click CLI interface.

These tests verify that:
1. Options of both subcommands reach the configuration
2. Environment variables are used as fallbacks
3. Invalid values fail with a usage or configuration error
4. Help and version options work
"""

import tempfile
import unittest
from importlib import import_module
from pathlib import Path
from unittest.mock import patch

import yaml
from click.testing import CliRunner

from flatten_bom import __version__
from flatten_bom._bom.transform import NON_PRODUCTIZED_DEPENDENCIES_FILE
from flatten_bom.cli.main import build_config, build_transitive_config, cli, parse_transformation, split_values
from flatten_bom.console import AuditTrail
from flatten_bom.exceptions import ConfigurationError, DependencyResolutionError
from flatten_bom.flatten import DEFAULT_REDUCED_POM_FILE
from flatten_bom.logging_config import set_log_level

# flatten_bom.cli re-exports names of the module, so fetch the module object itself to patch it.
cli_main_module = import_module("flatten_bom.cli.main")

WORKSPACE = {
    "project": {"groupId": "org.acme", "artifactId": "acme-bom", "version": "1.0"},
    "properties": {"community.version": "1.0-community"},
    "bom": [
        {"groupId": "org.acme", "artifactId": "acme-core", "version": "${project.version}"},
        {"groupId": "org.lib", "artifactId": "lib-a", "version": "2.0"},
        {"groupId": "org.lib", "artifactId": "unused", "version": "1.0"},
    ],
    "modules": [{"ga": "org.acme:acme-core", "dependencies": [{"groupId": "org.lib", "artifactId": "lib-a"}]}],
    "graphs": {"org.acme:acme-core": ["org.lib:lib-a"]},
}

PLATFORM_COMMUNITY = "${platform-community.version}"

PLATFORM_POM = """<?xml version="1.0" encoding="UTF-8"?>
<project xmlns="http://maven.apache.org/POM/4.0.0">
    <artifactId>acme-bom</artifactId>
    <dependencyManagement>
        <dependencies>
            <!-- platform -->
            <dependency>
                <groupId>io.quarkus</groupId>
                <artifactId>quarkus-core</artifactId>
                <version>${platform-community.version}</version>
            </dependency>
        </dependencies>
    </dependencyManagement>
</project>
"""


class CliTestCase(unittest.TestCase):
    def setUp(self):
        self.runner = CliRunner()
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp = Path(self._tmp.name)
        self.workspace = self.tmp / "flatten-bom.yaml"
        self.workspace.write_text(yaml.safe_dump(WORKSPACE))

    def tearDown(self):
        self._tmp.cleanup()
        set_log_level("INFO")


class TestCLIHelp(CliTestCase):
    """Test CLI help and version options."""

    def test_help_option(self):
        result = self.runner.invoke(cli, ["--help"])
        self.assertEqual(result.exit_code, 0)
        self.assertIn("Reduce a Maven BOM", result.output)
        self.assertIn("flatten", result.output)
        self.assertIn("transitive", result.output)

    def test_short_help_option(self):
        result = self.runner.invoke(cli, ["flatten", "-h"])
        self.assertEqual(result.exit_code, 0)
        self.assertIn("--install-flavor", result.output)
        self.assertIn("--on-failure", result.output)

    def test_version_option(self):
        result = self.runner.invoke(cli, ["--version"])
        self.assertEqual(result.exit_code, 0)
        self.assertIn("flatten-bom", result.output)
        self.assertIn(__version__, result.output)

    def test_no_args_shows_help_with_banner(self):
        result = self.runner.invoke(cli, [])
        self.assertEqual(result.exit_code, 0)
        self.assertIn("flatten-bom", result.output)
        self.assertIn("Commands", result.output)

    def test_verbose_and_quiet_conflict(self):
        result = self.runner.invoke(cli, ["-v", "-q", "flatten", str(self.workspace)])
        self.assertEqual(result.exit_code, 2)
        self.assertIn("Cannot use both --verbose and --quiet", result.output)


class TestFlattenCommand(CliTestCase):
    @patch.object(cli_main_module, "run_pipeline")
    def test_defaults(self, mock_run):
        result = self.runner.invoke(cli, ["flatten", str(self.workspace)])
        self.assertEqual(result.exit_code, 0, result.output)

        config = mock_run.call_args[0][0]
        self.assertEqual(config.workspace, str(self.workspace))
        self.assertEqual(config.on_failure, "FAIL")
        self.assertEqual(config.install_flavor, "REDUCED")
        self.assertEqual(config.max_workers, 1)
        self.assertFalse(config.format)
        self.assertFalse(config.quickly)
        self.assertEqual(config.resolved_base_dir, self.tmp)
        self.assertEqual(config.pom_path, self.tmp / "pom.xml")

    @patch.object(cli_main_module, "run_pipeline")
    def test_repeated_and_comma_separated_patterns(self, mock_run):
        result = self.runner.invoke(
            cli,
            [
                "flatten",
                str(self.workspace),
                "--include",
                "org.acme:*,io.vertx",
                "--include",
                "org.other",
                "--exclude",
                "org.acme:*-test",
                "--origin-exclude",
                "io.quarkus:quarkus-bom",
                "--suspect",
                "javax.*",
                "-j",
                "4",
            ],
        )
        self.assertEqual(result.exit_code, 0, result.output)

        config = mock_run.call_args[0][0]
        self.assertEqual(config.entry_point_includes, ["org.acme:*", "io.vertx", "org.other"])
        self.assertEqual(config.entry_point_excludes, ["org.acme:*-test"])
        self.assertEqual(config.origin_excludes, ["io.quarkus:quarkus-bom"])
        self.assertEqual(config.suspects, ["javax.*"])
        self.assertEqual(config.max_workers, 4)

    @patch.object(cli_main_module, "run_pipeline")
    def test_transformations_are_parsed(self, mock_run):
        result = self.runner.invoke(
            cli,
            ["flatten", str(self.workspace), "--transformation", r"*:x|1\.0/2.0|org.legacy:api"],
        )
        self.assertEqual(result.exit_code, 0, result.output)

        transformation = mock_run.call_args[0][0].parsed_transformations[0]
        self.assertEqual(str(transformation.gav_pattern), "*:x")

    @patch.object(cli_main_module, "run_pipeline")
    def test_choices_are_case_insensitive(self, mock_run):
        result = self.runner.invoke(
            cli, ["flatten", str(self.workspace), "--on-failure", "warn", "--install-flavor", "full"]
        )
        self.assertEqual(result.exit_code, 0, result.output)

        config = mock_run.call_args[0][0]
        self.assertEqual(config.on_failure, "WARN")
        self.assertEqual(config.install_flavor, "FULL")

    def test_invalid_choice(self):
        result = self.runner.invoke(cli, ["flatten", str(self.workspace), "--on-failure", "explode"])
        self.assertEqual(result.exit_code, 2)
        self.assertIn("Invalid value", result.output)

    def test_missing_workspace(self):
        result = self.runner.invoke(cli, ["flatten", str(self.tmp / "missing.yaml")])
        self.assertEqual(result.exit_code, 1)
        self.assertIn("Workspace descriptor not found", result.output)

    def test_format_needs_pom(self):
        result = self.runner.invoke(cli, ["flatten", str(self.workspace), "--format"])
        self.assertEqual(result.exit_code, 1)
        self.assertIn("--format needs the BOM's pom.xml", result.output)

    @patch.object(cli_main_module, "run_pipeline")
    def test_pipeline_failure_exits_non_zero(self, mock_run):
        mock_run.side_effect = DependencyResolutionError("Could not resolve dependencies of a:x:1")
        result = self.runner.invoke(cli, ["flatten", str(self.workspace)])
        self.assertEqual(result.exit_code, 1)
        self.assertIn("Could not resolve dependencies of a:x:1", result.output)

    def test_end_to_end(self):
        audit_file = self.tmp / "audit.txt"
        result = self.runner.invoke(
            cli, ["flatten", str(self.workspace), "--include", "org.acme", "--audit-file", str(audit_file)]
        )
        self.assertEqual(result.exit_code, 0, result.output)

        reduced = (self.tmp / DEFAULT_REDUCED_POM_FILE).read_text()
        self.assertIn("<artifactId>lib-a</artifactId>", reduced)
        self.assertNotIn("<artifactId>unused</artifactId>", reduced)
        self.assertIn("org.lib:unused:1.0 DROPPED", audit_file.read_text())

    def test_unwritable_audit_file_fails_the_run(self):
        audit_file = self.tmp / "missing" / "audit.txt"
        result = self.runner.invoke(
            cli, ["flatten", str(self.workspace), "--include", "org.acme", "--audit-file", str(audit_file)]
        )
        self.assertEqual(result.exit_code, 1)
        self.assertIn("Could not write audit trail", result.output)

    def test_audit_file_error_of_a_failing_run_is_only_logged(self):
        config = build_config(workspace=str(self.workspace), audit_file=str(self.tmp / "missing" / "audit.txt"))
        with self.assertLogs("flatten_bom", level="ERROR") as logs:
            cli_main_module._write_audit_file(AuditTrail(), config, failing=True)
        self.assertIn("Could not write audit trail", logs.output[0])


class TestCLIEnvVarFallback(CliTestCase):
    @patch.object(cli_main_module, "run_pipeline")
    def test_env_var_fallback(self, mock_run):
        result = self.runner.invoke(
            cli,
            ["flatten"],
            env={
                "FLATTEN_BOM_WORKSPACE": str(self.workspace),
                "FLATTEN_BOM_ON_FAILURE": "IGNORE",
                "FLATTEN_BOM_MAX_WORKERS": "3",
                "FLATTEN_BOM_QUICKLY": "true",
            },
        )
        self.assertEqual(result.exit_code, 0, result.output)

        config = mock_run.call_args[0][0]
        self.assertEqual(config.workspace, str(self.workspace))
        self.assertEqual(config.on_failure, "IGNORE")
        self.assertEqual(config.max_workers, 3)
        self.assertTrue(config.quickly)

    @patch.object(cli_main_module, "run_pipeline")
    def test_cli_takes_precedence_over_env(self, mock_run):
        result = self.runner.invoke(
            cli,
            ["flatten", str(self.workspace), "--on-failure", "FAIL"],
            env={"FLATTEN_BOM_ON_FAILURE": "WARN"},
        )
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertEqual(mock_run.call_args[0][0].on_failure, "FAIL")


class TestTransitiveCommand(CliTestCase):
    @patch.object(cli_main_module, "run_transitive")
    def test_options(self, mock_run):
        result = self.runner.invoke(
            cli,
            [
                "transitive",
                str(self.workspace),
                "--product-version",
                "1.0.0.redhat-00001",
                "--additional-dependency",
                "acme-core=org.lib:shaded,org.lib:other",
                "--upstream-group",
                "io.quarkus",
                "--namespace-report-file",
                "javax.txt",
            ],
        )
        self.assertEqual(result.exit_code, 0, result.output)

        config = mock_run.call_args[0][0]
        self.assertEqual(config.product_version, "1.0.0.redhat-00001")
        self.assertEqual(config.additional_dependencies_mapping(), {"acme-core": "org.lib:shaded,org.lib:other"})
        self.assertEqual(config.upstream_groups, ["io.quarkus"])
        self.assertEqual(config.namespace_prefix, "javax/")

    def test_invalid_additional_dependency(self):
        result = self.runner.invoke(cli, ["transitive", str(self.workspace), "--additional-dependency", "broken"])
        self.assertEqual(result.exit_code, 1)
        self.assertIn("Invalid additional extension dependency", result.output)

    def test_end_to_end(self):
        self.workspace.write_text(
            yaml.safe_dump(
                dict(
                    WORKSPACE,
                    bom=[{"groupId": "org.acme", "artifactId": "acme-core", "version": "${community.version}"}]
                    + WORKSPACE["bom"][1:],
                )
            )
        )
        result = self.runner.invoke(cli, ["transitive", str(self.workspace)])
        self.assertEqual(result.exit_code, 0, result.output)
        non_productized = self.tmp / NON_PRODUCTIZED_DEPENDENCIES_FILE
        self.assertEqual(non_productized.read_text(), "org.acme:acme-core\norg.lib:lib-a\norg.lib:unused\n")

    def test_platform_entry_versions_are_updated_in_the_pom(self):
        self.workspace.write_text(
            yaml.safe_dump(
                dict(
                    WORKSPACE,
                    bom=WORKSPACE["bom"]
                    + [{"groupId": "io.quarkus", "artifactId": "quarkus-core", "version": PLATFORM_COMMUNITY}],
                    graphs={"org.acme:acme-core": ["org.lib:lib-a", "io.quarkus:quarkus-core"]},
                )
            )
        )
        pom = self.tmp / "pom.xml"
        pom.write_text(PLATFORM_POM)
        result = self.runner.invoke(cli, ["transitive", str(self.workspace), "--platform-group", "io.quarkus"])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertEqual(pom.read_text(), PLATFORM_POM.replace(PLATFORM_COMMUNITY, "${platform.version}"))


class TestBuildConfig(CliTestCase):
    def test_build_config(self):
        config = build_config(
            workspace=str(self.workspace),
            entry_point_includes=("a,b", "c"),
            on_failure="ignore",
            install_flavor="reduced-verbose",
        )
        self.assertEqual(config.entry_point_includes, ["a", "b", "c"])
        self.assertEqual(config.on_failure, "IGNORE")
        self.assertEqual(config.install_flavor, "REDUCED_VERBOSE")

    def test_invalid_max_workers(self):
        with self.assertRaises(ConfigurationError):
            build_config(workspace=str(self.workspace), max_workers=0)

    def test_build_transitive_config(self):
        config = build_transitive_config(workspace=str(self.workspace), upstream_groups=("a,b",))
        self.assertEqual(config.upstream_groups, ["a", "b"])
        self.assertEqual(config.resolved_base_dir, self.tmp)

    def test_split_values(self):
        self.assertEqual(split_values(None), [])
        self.assertEqual(split_values(["a, b", "", "c"]), ["a", "b", "c"])

    def test_parse_transformation(self):
        transformation = parse_transformation("org.acme:*||org.legacy:legacy-api")
        self.assertIsNone(transformation.version_pattern)
        self.assertEqual([str(e) for e in transformation.add_exclusions], ["org.legacy:legacy-api"])

    def test_parse_transformation_invalid(self):
        for raw in ("", "|1/2", "a|b|c|d"):
            with self.assertRaises(ConfigurationError):
                parse_transformation(raw)
