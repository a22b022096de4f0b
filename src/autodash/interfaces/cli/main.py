import argparse
import json
import logging
from pathlib import Path
from typing import Optional, Tuple

import colorlog

from autodash import __version__ as _PACKAGE_VERSION
from autodash.automagic import automagic_dashboard
from autodash.core.hierarchy import TypeHierarchy, default_hierarchy
from autodash.dashboard import InMemoryDashboardSink, JsonDashboardSink
from autodash.rules.registry import RuleSet
from autodash.rules.selection import best_matching_rule, specificity
from autodash.schema.provider import SchemaMetadata


def setup_logging(
    verbose: bool = False, warnings_only: bool = False, errors_only: bool = False
) -> None:
    logger = logging.getLogger()
    for h in list(logger.handlers):
        logger.removeHandler(h)
    log_format = (
        "%(asctime)s:%(levelname)s:%(name)s in %(filename)s:%(funcName)s:%(lineno)d: %(message)s"
    )
    log_colors = {
        "DEBUG": "cyan",
        "INFO": "green",
        "WARNING": "yellow",
        "ERROR": "red",
        "CRITICAL": "bold_red",
    }
    stream_handler = colorlog.StreamHandler()
    formatter = colorlog.ColoredFormatter(f"%(log_color)s{log_format}", log_colors=log_colors)
    stream_handler.setFormatter(formatter)
    logger.addHandler(stream_handler)
    if errors_only:
        logger.setLevel(logging.ERROR)
    elif warnings_only:
        logger.setLevel(logging.WARNING)
    else:
        logger.setLevel(logging.DEBUG if verbose else logging.INFO)


def _load_hierarchy(types_path: Optional[str]) -> TypeHierarchy:
    if types_path:
        return TypeHierarchy.from_yaml(Path(types_path))
    return default_hierarchy()


def _load_inputs(
    args: argparse.Namespace,
) -> Optional[Tuple[TypeHierarchy, RuleSet]]:
    """Hierarchy and rules, or None after logging the failure."""
    try:
        hierarchy = _load_hierarchy(getattr(args, "types", None))
        rules = RuleSet.from_path(Path(args.rules), hierarchy)
    except (FileNotFoundError, ValueError) as e:
        logging.error("%s", e)
        return None
    return hierarchy, rules


def cmd_generate(args: argparse.Namespace) -> int:
    """Generate a dashboard for one table.

    Returns 0 when a dashboard was created, 1 when no card produced a
    candidate and 2 for bad inputs or a table no rule applies to.
    """
    loaded = _load_inputs(args)
    if loaded is None:
        return 2
    hierarchy, rules = loaded

    try:
        metadata = SchemaMetadata.from_csv(Path(args.schema_dir))
        root = metadata.find_table(args.table)
    except (FileNotFoundError, ValueError) as e:
        logging.error("%s", e)
        return 2
    except KeyError as e:
        logging.error("%s", e.args[0] if e.args else e)
        return 2

    output_dir = getattr(args, "output_dir", None)
    sink = JsonDashboardSink(Path(output_dir)) if output_dir else InMemoryDashboardSink()

    try:
        dashboard_id = automagic_dashboard(
            root,
            rules=rules,
            metadata=metadata,
            hierarchy=hierarchy,
            sink=sink,
            max_candidates=getattr(args, "max_candidates", None),
        )
    except ValueError as e:
        logging.error("%s", e)
        return 2

    if dashboard_id is None:
        logging.warning("No dashboard created for table %s: no viable cards", root.name)
        return 1

    if isinstance(sink, InMemoryDashboardSink):
        print(json.dumps(sink.dashboards[dashboard_id], indent=2, ensure_ascii=False))
    logging.info("Dashboard %s created for table %s", dashboard_id, root.name)
    return 0


def cmd_rules(args: argparse.Namespace) -> int:
    """List loaded rules; with --table, mark the one that would be applied."""
    loaded = _load_inputs(args)
    if loaded is None:
        return 2
    hierarchy, rules = loaded

    selected = None
    if getattr(args, "table", None):
        if not getattr(args, "schema_dir", None):
            logging.error("--schema-dir is required when --table is provided")
            return 2
        try:
            metadata = SchemaMetadata.from_csv(Path(args.schema_dir))
            root = metadata.find_table(args.table)
        except (FileNotFoundError, ValueError) as e:
            logging.error("%s", e)
            return 2
        except KeyError as e:
            logging.error("%s", e.args[0] if e.args else e)
            return 2
        selected = best_matching_rule(rules, root, hierarchy)
        if selected is None:
            logging.warning("No applicable rule for table %s", root.name)

    print(f"{len(rules)} rules loaded from {args.rules}")
    for rule in rules:
        marker = "*" if rule is selected else " "
        summary = rule.summary()
        print(
            f"{marker} {rule.table_type:<40} specificity={specificity(rule, hierarchy)} "
            f"dimensions={summary['dimensions']} metrics={summary['metrics']} "
            f"filters={summary['filters']} cards={summary['cards']}"
        )
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="autodash",
        description=f"Automatic dashboard generation (v{_PACKAGE_VERSION})",
    )
    p.add_argument("--verbose", action="store_true", help="Enable verbose logging")
    p.add_argument(
        "--warnings-only",
        action="store_true",
        help="Show only warnings and errors (overrides --verbose)",
    )
    p.add_argument(
        "--errors-only",
        action="store_true",
        help="Show only errors (overrides --warnings-only and --verbose)",
    )

    sub = p.add_subparsers(dest="command", required=True)

    p_generate = sub.add_parser("generate", help="Generate a dashboard for a table")
    p_generate.add_argument(
        "--schema-dir",
        required=True,
        help="Directory containing tables.csv and fields.csv",
    )
    p_generate.add_argument(
        "--rules",
        default=str(Path("config/rules").resolve()),
        help="Rule file or directory of rule files (defaults to ./config/rules)",
    )
    p_generate.add_argument("--table", required=True, help="Root table name or id")
    p_generate.add_argument(
        "--types",
        default=None,
        help="YAML file extending the built-in type hierarchy",
    )
    p_generate.add_argument(
        "--output-dir",
        default=None,
        help="Write dashboard_<id>.json here (prints the dashboard to stdout when omitted)",
    )
    p_generate.add_argument(
        "--max-candidates",
        type=int,
        default=None,
        help="Maximum candidates enumerated per card",
    )
    p_generate.set_defaults(func=cmd_generate)

    p_rules = sub.add_parser("rules", help="List rules and their specificity")
    p_rules.add_argument(
        "--rules",
        default=str(Path("config/rules").resolve()),
        help="Rule file or directory of rule files (defaults to ./config/rules)",
    )
    p_rules.add_argument(
        "--types",
        default=None,
        help="YAML file extending the built-in type hierarchy",
    )
    p_rules.add_argument("--schema-dir", default=None, help="Schema directory (with --table)")
    p_rules.add_argument("--table", default=None, help="Mark the rule selected for this table")
    p_rules.set_defaults(func=cmd_rules)

    return p


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(
        verbose=bool(args.verbose),
        warnings_only=bool(getattr(args, "warnings_only", False)),
        errors_only=bool(getattr(args, "errors_only", False)),
    )
    return args.func(args)


if __name__ == "__main__":
    raise SystemExit(main())
