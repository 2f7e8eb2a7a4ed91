"""PeerFix - peer dependency analyzer and fixer.

Pipeline per run: Load -> WalkAll -> Classify -> Report, or with ``--fix``
Load -> WalkAll -> Classify -> Plan -> Install -> Verify -> Report.
"""
import logging
import os
import sys

from args import parse_args
from analysis.classifier import IssueClassifier
from analysis.walker import GraphWalker
from catalog import DependencyCatalog, default_manager, load_manifest
from common.logging_utils import add_file_handler, configure_logging, extra_context, is_debug_enabled
from config import Settings, build_settings, load_config
from constants import ExitCodes
from errors import ConfigError, ManifestUnreadable
from fix.installer import Installer, SubprocessInstaller
from fix.planner import FixPlanner
from registry import MetadataSource, get_source
from report import build_report, export_json, render_text
from versioning.models import Classification

logger = logging.getLogger(__name__)


def analyze(catalog: DependencyCatalog, settings: Settings) -> Classification:
    """Walk every root in the catalog and classify the collected issues."""
    walker = GraphWalker(
        ignore_patterns=settings.ignore_patterns,
        optional_peers=settings.optional_peers,
    )
    issues = walker.walk_all(catalog)
    return IssueClassifier().classify(issues)


def run(argv=None, source: MetadataSource = None, installer: Installer = None) -> int:
    """Run the CLI and return the process exit code.

    ``source`` and ``installer`` replace the ones built from settings.
    """
    args = parse_args(argv)
    configure_logging(args.LOG_LEVEL)
    if args.LOG_FILE:
        add_file_handler(args.LOG_FILE)

    if is_debug_enabled(logger):
        logger.debug(
            "CLI start",
            extra=extra_context(event="function_entry", component="cli", action="run")
        )

    try:
        settings = build_settings(args, load_config(args.CONFIG))
    except ConfigError as e:
        logger.error("%s", e)
        return ExitCodes.CONFIG_ERROR.value

    project_dir = os.path.abspath(args.DIRECTORY)

    # LOAD
    try:
        manifest = load_manifest(project_dir)
    except ManifestUnreadable as e:
        logger.error("%s, aborting", e)
        return ExitCodes.FILE_ERROR.value

    manager = settings.manager or default_manager(manifest)
    if source is None:
        source = get_source(settings.source, project_dir, settings.registry_url)
    logger.info("Reading peer metadata from %s (%s)", source.name, manager)
    catalog = DependencyCatalog.load(manifest, source, max_workers=settings.max_workers)
    logger.info("Loaded %d declared packages", len(catalog))

    # WALK + CLASSIFY
    classification = analyze(catalog, settings)

    # PLAN -> INSTALL -> VERIFY
    outcome = None
    if args.FIX and classification.errors:
        planner = FixPlanner(batch_size=settings.batch_size)
        plan = planner.plan(classification.errors, manager)
        outcome = planner.execute(plan, installer or SubprocessInstaller(project_dir))
    elif args.FIX:
        logger.info("No issues to fix!")

    # REPORT
    report = build_report(classification, manager, outcome)
    if args.OUTPUT:
        try:
            export_json(report, args.OUTPUT)
        except OSError as e:
            logger.error("JSON report couldn't be written to disk: %s", e)
            return ExitCodes.FILE_ERROR.value
    if not args.QUIET:
        sys.stdout.write(render_text(report) + "\n")

    if outcome is not None:
        if outcome.failed:
            return ExitCodes.INSTALL_ERROR.value
        if not outcome.resolved:
            return ExitCodes.PEER_ERRORS.value
    elif classification.errors:
        logger.warning("%d unresolved peer dependency error(s).", len(classification.errors))
        return ExitCodes.PEER_ERRORS.value

    if classification.warnings and args.ERROR_ON_WARNINGS:
        logger.error("Warnings present, exiting with non-zero status code.")
        return ExitCodes.PEER_ERRORS.value
    return ExitCodes.SUCCESS.value


def main():
    """Main function of the program."""
    sys.exit(run())


if __name__ == "__main__":
    main()
