"""진입점: python -m flowtagger"""

from __future__ import annotations

import argparse
import logging
import sys

EXIT_OK            = 0
EXIT_INVALID_INPUT = 1
EXIT_CONFIG_ERROR  = 2
EXIT_RUN_FAILED    = 3

logger = logging.getLogger("flowtagger.main")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="flowtagger",
        description="FlowTagger - tag flow log records by destination port/protocol and count them",
    )
    parser.add_argument("log_file", help="Path to the flow log file")
    parser.add_argument("lookup_file", help="Path to the port,protocol,tag lookup file")
    parser.add_argument(
        "-o", "--output",
        default=None,
        help="Report output path (default: output.path from config)",
    )
    parser.add_argument(
        "-c", "--config",
        default=None,
        help="Path to configuration YAML file (default: config/default.yaml)",
    )
    parser.add_argument("--chunk-size", type=int, default=None, help="Lines per chunk")
    parser.add_argument("--pool-size", type=int, default=None, help="Worker threads")
    parser.add_argument(
        "--max-wait-seconds", type=int, default=None,
        help="Maximum time to wait for chunk tasks before reporting partial results",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the report to stdout instead of writing the output file",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """FlowTagger CLI 진입점. 설정을 로드하고 집계를 실행한 뒤 종료 코드를 반환한다."""
    args = build_parser().parse_args(argv)

    import yaml

    from flowtagger.app import FlowTagger, InputFileError
    from flowtagger.lookup.table import LookupLoadError
    from flowtagger.report.writer import ReportWriteError, render_report
    from flowtagger.utils.config import Config, ConfigError
    from flowtagger.utils.logging_setup import setup_logging

    try:
        config = Config.load(args.config).with_overrides({
            "processing.chunk_size":       args.chunk_size,
            "processing.pool_size":        args.pool_size,
            "processing.max_wait_seconds": args.max_wait_seconds,
            "output.path":                 args.output,
        })
        setup_logging(config)
        app = FlowTagger(config)
    except (ConfigError, yaml.YAMLError, OSError) as exc:
        # 잘못된 YAML, 없는 설정 파일, 만들 수 없는 로그 디렉터리 포함
        print(f"Configuration error: {exc}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    try:
        if args.dry_run:
            result = app.aggregate(args.log_file, args.lookup_file)
            sys.stdout.write(render_report(
                result.tag_count, result.untagged_count, result.port_protocol_count,
            ))
        else:
            app.run(args.log_file, args.lookup_file)
    except InputFileError as exc:
        logger.error("%s", exc)
        return EXIT_INVALID_INPUT
    except (LookupLoadError, ReportWriteError, OSError) as exc:
        logger.error("Run failed: %s", exc)
        return EXIT_RUN_FAILED

    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
