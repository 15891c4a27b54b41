from __future__ import annotations

import argparse
import logging
import os
import shlex
import sys
from typing import List

from jarpath.cli.models import ArtifactOut, CheckOut, ClassPathOut, JarInfoOut
from jarpath.core.dependencies import DependencyError
from jarpath.core.settings import RuntimeSettings, settings_from_env
from jarpath.core.source import JarSource, classify_class_path, prepare_jar, resource_ref_for


def _configure_logging(args: argparse.Namespace) -> None:
    if getattr(args, "quiet", False):
        level = logging.ERROR
    elif getattr(args, "verbose", False):
        level = logging.DEBUG
    else:
        level = logging.INFO
    logging.basicConfig(level=level, format="[jarpath] %(message)s", stream=sys.stderr)


def _split_deps(values: List[str] | None) -> List[str]:
    """Flatten repeated/comma-separated --deps values, keeping order."""
    deps: List[str] = []
    for value in values or []:
        for dep in value.split(","):
            dep = dep.strip()
            if dep and dep not in deps:
                deps.append(dep)
    return deps


def _settings_for(args: argparse.Namespace) -> RuntimeSettings:
    return settings_from_env().with_overrides(
        offline=True if args.offline else None,
        fresh=True if args.fresh else None,
        quiet=True if args.quiet else None,
        local_repository=args.local_repository,
    )


def _jar_source_for(args: argparse.Namespace) -> JarSource:
    settings = _settings_for(args)
    ref = resource_ref_for(args.ref, local_repository=settings.local_repository)
    return prepare_jar(ref, settings=settings)


def _java_executable(args: argparse.Namespace) -> str:
    if args.java:
        return args.java
    java_home = os.environ.get("JAVA_HOME", "").strip()
    if java_home:
        return os.path.join(java_home, "bin", "java")
    return "java"


def cmd_info(args: argparse.Namespace) -> int:
    """Show the execution metadata embedded in a JAR."""
    jsrc = _jar_source_for(args)
    jar_file = jsrc.jar_file
    out = JarInfoOut(
        resource=jsrc.resource_ref.location,
        jar_file=str(jar_file) if jar_file is not None else None,
        exists=bool(jar_file is not None and jar_file.exists()),
        main_class=jsrc.main_class,
        java_version=jsrc.java_version,
        runtime_options=jsrc.runtime_options,
        embedded_class_path=jsrc.metadata.class_path,
    )

    if args.json:
        print(out.model_dump_json(indent=2))
        return 0

    print(f"Resource: {out.resource}")
    print(f"JAR: {out.jar_file}  exists={out.exists}")
    print(f"Main-Class: {out.main_class}")
    print(f"Java: {out.java_version}")
    print(f"Runtime options: {shlex.join(out.runtime_options)}")
    if out.embedded_class_path is not None:
        print(f"Class-Path: {out.embedded_class_path}")
    return 0


def cmd_classpath(args: argparse.Namespace) -> int:
    """Resolve and print the runtime classpath of a JAR."""
    jsrc = _jar_source_for(args)
    deps = _split_deps(args.deps)
    try:
        mcp = jsrc.resolve_class_path(deps)
    except DependencyError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    if args.json:
        strategy = classify_class_path(jsrc.resource_ref, jsrc.metadata.class_path, deps)
        out = ClassPathOut(
            strategy=strategy.value,
            valid=mcp.is_valid,
            class_path=mcp.class_path,
            artifacts=[
                ArtifactOut(
                    path=str(a.file),
                    coordinate=str(a.coordinate) if a.coordinate is not None else None,
                    module_path=a.module_path,
                )
                for a in mcp
            ],
        )
        print(out.model_dump_json(indent=2))
        return 0

    print(mcp.class_path)
    return 0


def cmd_check(args: argparse.Namespace) -> int:
    """Exit 0 if the JAR is up to date, 1 if it needs rebuilding."""
    jsrc = _jar_source_for(args)
    try:
        up_to_date = jsrc.is_up_to_date()
    except DependencyError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    if args.json:
        print(CheckOut(resource=jsrc.resource_ref.location, up_to_date=up_to_date).model_dump_json(indent=2))
    else:
        print("up-to-date" if up_to_date else "stale")
    return 0 if up_to_date else 1


def cmd_command(args: argparse.Namespace) -> int:
    """Print the java command line that would run the JAR."""
    jsrc = _jar_source_for(args)
    if jsrc.jar_file is None or not jsrc.jar_file.exists():
        print(f"error: file not found: {jsrc.jar_file}", file=sys.stderr)
        return 2
    if not jsrc.main_class:
        print(f"error: no Main-Class in manifest of {jsrc.resource_ref.location}", file=sys.stderr)
        return 2

    try:
        mcp = jsrc.resolve_class_path(_split_deps(args.deps))
    except DependencyError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    class_paths = [str(a.file) for a in mcp.class_path_entries]
    jar = str(jsrc.jar_file)
    if jar not in class_paths and jar not in (str(a.file) for a in mcp.module_path_entries):
        class_paths.insert(0, jar)

    cmd = [_java_executable(args), *jsrc.runtime_options, *mcp.auto_detected_module_arguments()]
    if class_paths:
        cmd += ["-classpath", os.pathsep.join(class_paths)]
    cmd.append(jsrc.main_class)
    cmd += args.args
    print(shlex.join(cmd))
    return 0


def _add_common_arguments(p: argparse.ArgumentParser) -> None:
    p.add_argument("ref", help="JAR file path or group:artifact:version coordinate")
    p.add_argument("--offline", action="store_true", help="Do not access remote repositories")
    p.add_argument("--fresh", action="store_true", help="Discard cached dependency information")
    p.add_argument("--quiet", action="store_true", help="Only print errors")
    p.add_argument("--verbose", action="store_true", help="Print debug output")
    p.add_argument("--local-repository", default=None, help="Maven-layout local repository root")


def build_parser() -> argparse.ArgumentParser:
    """Build the CLI parser."""
    p = argparse.ArgumentParser(prog="jarpath", description="Resolve how to run a prebuilt JAR")
    sub = p.add_subparsers(dest="cmd", required=True)

    ip = sub.add_parser("info", help="Show Main-Class, Java version and runtime options of a JAR")
    _add_common_arguments(ip)
    ip.add_argument("--json", action="store_true", help="Print JSON")
    ip.set_defaults(func=cmd_info)

    cp = sub.add_parser("classpath", help="Resolve the runtime classpath of a JAR")
    _add_common_arguments(cp)
    cp.add_argument("--deps", action="append", default=[], help="Extra dependency coordinates (repeatable)")
    cp.add_argument("--json", action="store_true", help="Print JSON")
    cp.set_defaults(func=cmd_classpath)

    ck = sub.add_parser("check", help="Check whether a JAR is up to date (exit 1 if stale)")
    _add_common_arguments(ck)
    ck.add_argument("--json", action="store_true", help="Print JSON")
    ck.set_defaults(func=cmd_check)

    cm = sub.add_parser(
        "command",
        help="Print the java command line for running a JAR",
        epilog="Application arguments go after --, e.g. jarpath command app.jar -- arg1 arg2",
    )
    _add_common_arguments(cm)
    cm.add_argument("--deps", action="append", default=[], help="Extra dependency coordinates (repeatable)")
    cm.add_argument("--java", default=None, help="java executable (default: $JAVA_HOME/bin/java or java)")
    cm.set_defaults(func=cmd_command)

    return p


def main(argv: List[str] | None = None) -> int:
    """CLI entry."""
    parser = build_parser()
    argv = list(sys.argv[1:] if argv is None else argv)
    app_args: List[str] = []
    if "--" in argv:
        i = argv.index("--")
        argv, app_args = argv[:i], argv[i + 1 :]
    args = parser.parse_args(argv)
    if app_args and args.cmd != "command":
        parser.error(f"{args.cmd} does not take application arguments")
    args.args = app_args
    _configure_logging(args)
    return int(args.func(args))


if __name__ == "__main__":
    raise SystemExit(main())
