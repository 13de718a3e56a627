"""
Command-line interface for the slurmrestd client.
"""

import argparse
import logging
import sys
from dataclasses import replace
from typing import List, Optional, Sequence

from .slurm.accounting import summarize_jobs
from .slurm.auth import DEFAULT_LIFESPAN, generate_token
from .slurm.client import SlurmRestClient
from .slurm.config import RestConfig
from .slurm.errors import Result, TokenError
from .slurm.job import JobInfo, JobState
from .slurm.json_encoder import dump
from .slurm.monitor import SlurmMonitor
from .slurm.submit import JobSubmit

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def setup_logging(log_level: str = "WARNING") -> logging.Logger:
    """Attach a console handler to the package logger."""
    logger = logging.getLogger("slurm_rest")
    logger.setLevel(getattr(logging, log_level.upper()))

    # Add console handler if not already present
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setLevel(getattr(logging, log_level.upper()))
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)

    return logger


def build_config(args: argparse.Namespace) -> RestConfig:
    """
    Resolve the client configuration from the environment and arguments.

    Raises:
        TokenError: If --user was given and no token could be issued
    """
    config = RestConfig.from_env()
    if args.url:
        config = replace(config, base_url=args.url.rstrip('/'))
    if args.api_version:
        config = replace(config, api_version=args.api_version)
    if args.user:
        config = RestConfig.with_token(config.base_url, args.user,
                                       lifespan=args.lifespan,
                                       api_version=config.api_version)
    return config


def parse_env_pairs(values: Optional[Sequence[str]]) -> List[tuple]:
    pairs = []
    for item in values or []:
        key, sep, value = item.partition('=')
        if not sep or not key:
            raise argparse.ArgumentTypeError(f"Expected KEY=VALUE, got {item!r}")
        pairs.append((key, value))
    return pairs


def format_job(job: JobInfo) -> str:
    exit_code = "-" if job.exit_code is None else str(job.exit_code)
    return f"{job.job_id:>10}  {job.name:<24.24}  {job.user_name:<12.12}  {job.job_state:<14}  {exit_code}"


def print_jobs(jobs: Sequence[JobInfo], as_json: bool) -> None:
    if as_json:
        dump(list(jobs), sys.stdout, indent=2)
        print()
        return
    print(f"{'JOBID':>10}  {'NAME':<24}  {'USER':<12}  {'STATE':<14}  EXIT")
    for job in jobs:
        print(format_job(job))


def report_error(result: Result) -> int:
    print(f"Error: {result.error}", file=sys.stderr)
    return 1


def cmd_token(args: argparse.Namespace) -> int:
    result = generate_token(args.token_user, lifespan=args.lifespan)
    if not result.ok:
        return report_error(result)
    print(f"SLURM_JWT={result.value}")
    return 0


def cmd_submit(client: SlurmRestClient, args: argparse.Namespace) -> int:
    spec = JobSubmit.from_script_file(
        args.script,
        name=args.name,
        account=args.account,
        partition=args.partition,
        nodes=args.nodes,
        tasks=args.tasks,
        cpus_per_task=args.cpus_per_task,
        memory_mb=args.mem,
        time_limit=args.time,
        environment=parse_env_pairs(args.env),
        constraints=args.constraint,
        working_directory=args.chdir,
        stdout_path=args.output,
        stderr_path=args.error,
        array=args.array,
    )
    result = client.submit_job(spec)
    if not result.ok:
        return report_error(result)
    print(result.value)

    if args.wait:
        return watch(client, result.value, spec.name, args)
    return 0


def watch(client: SlurmRestClient, job_id: str, job_name: Optional[str],
          args: argparse.Namespace) -> int:
    monitor = SlurmMonitor(client, check_interval=args.interval, max_polls=args.max_polls)
    outcome = monitor.monitor_job(job_id, job_name=job_name, show_progress=not args.json)
    if outcome.error is not None:
        print(f"Error: {outcome.error}", file=sys.stderr)
        return 1

    if args.json:
        dump({'finished': outcome.finished, 'attempts': outcome.attempts,
              'job': outcome.job_info}, sys.stdout, indent=2)
        print()
    elif outcome.job_info is not None:
        monitor.print_job_summary(outcome.job_info)

    if not outcome.finished:
        print(f"Giving up after {outcome.attempts} polls", file=sys.stderr)
        return 1
    return 0 if outcome.job_info.state == JobState.COMPLETED else 1


def cmd_status(client: SlurmRestClient, args: argparse.Namespace) -> int:
    result = client.get_job(args.job_id)
    if not result.ok:
        return report_error(result)
    print_jobs([result.value], args.json)
    return 0


def cmd_list(client: SlurmRestClient, args: argparse.Namespace) -> int:
    result = client.get_jobs(args.job_ids or None)
    if not result.ok:
        return report_error(result)
    print_jobs(result.value, args.json)
    return 0


def cmd_cancel(client: SlurmRestClient, args: argparse.Namespace) -> int:
    result = client.cancel_job(args.job_id)
    if not result.ok:
        return report_error(result)
    print(f"Cancelled {args.job_id}")
    return 0


def cmd_history(client: SlurmRestClient, args: argparse.Namespace) -> int:
    users = args.users.split(',') if args.users else None
    result = client.list_historical(users)
    if not result.ok:
        return report_error(result)

    if not args.summary:
        print_jobs(result.value, args.json)
        return 0

    summary = summarize_jobs(result.value)
    if args.json:
        dump(summary, sys.stdout, indent=2)
        print()
        return 0

    print(f"Jobs: {summary['n_jobs']}")
    for state, count in sorted(summary['state_counts'].items()):
        print(f"  {state:<14} {count}")
    for label in ('wait_time', 'run_time'):
        stats = summary[label]
        if stats:
            print(f"{label.replace('_', ' ').capitalize()}: mean {stats['mean']:.0f}s, "
                  f"median {stats['median']:.0f}s, p90 {stats['p90']:.0f}s, max {stats['max']:.0f}s")
    if summary['failed_exit_codes']:
        print(f"Non-zero exit codes: {summary['failed_exit_codes']}")
    return 0


def make_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="slurm-rest", description="Client for the slurmrestd API")
    parser.add_argument('--url', help='slurmrestd base URL (default: $SLURM_REST_URL)')
    parser.add_argument('--api-version', help='API version segment, e.g. v0.0.40')
    parser.add_argument('--user', help='Issue a JWT for this user with scontrol')
    parser.add_argument('--lifespan', type=int, default=DEFAULT_LIFESPAN,
                        help='Token lifespan in seconds')
    parser.add_argument('--json', action='store_true', help='Print JSON output')
    parser.add_argument('--log-level', default='WARNING', help='Logging level')

    sub = parser.add_subparsers(dest='command', required=True)

    token = sub.add_parser('token', help='Generate a JWT with scontrol')
    token.add_argument('token_user', metavar='USER')

    submit = sub.add_parser('submit', help='Submit a batch script')
    submit.add_argument('script')
    submit.add_argument('--name')
    submit.add_argument('--account')
    submit.add_argument('--partition')
    submit.add_argument('--nodes')
    submit.add_argument('--tasks', type=int)
    submit.add_argument('--cpus-per-task', type=int)
    submit.add_argument('--mem', type=int, help='Memory per node in MB')
    submit.add_argument('--time', type=int, help='Time limit in minutes')
    submit.add_argument('--env', action='append', metavar='KEY=VALUE')
    submit.add_argument('--constraint')
    submit.add_argument('--chdir')
    submit.add_argument('--output')
    submit.add_argument('--error')
    submit.add_argument('--array')
    submit.add_argument('--wait', action='store_true', help='Monitor the job until it finishes')
    submit.add_argument('--interval', type=float, default=2.0)
    submit.add_argument('--max-polls', type=int, default=20)

    status = sub.add_parser('status', help='Show one job')
    status.add_argument('job_id')

    jobs = sub.add_parser('list', help='List jobs known to the scheduler')
    jobs.add_argument('job_ids', nargs='*')

    cancel = sub.add_parser('cancel', help='Cancel a job')
    cancel.add_argument('job_id')

    history = sub.add_parser('history', help='List jobs from the accounting database')
    history.add_argument('--users', help='Comma-separated user names')
    history.add_argument('--summary', action='store_true', help='Print aggregate statistics')

    watch_cmd = sub.add_parser('watch', help='Poll a job until it finishes')
    watch_cmd.add_argument('job_id')
    watch_cmd.add_argument('--interval', type=float, default=2.0)
    watch_cmd.add_argument('--max-polls', type=int, default=20)

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point for command-line execution."""
    parser = make_parser()
    args = parser.parse_args(argv)
    setup_logging(args.log_level)

    if args.command == 'token':
        return cmd_token(args)

    try:
        config = build_config(args)
    except TokenError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    client = SlurmRestClient(config)

    if args.command == 'submit':
        try:
            return cmd_submit(client, args)
        except (OSError, argparse.ArgumentTypeError) as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1
    elif args.command == 'status':
        return cmd_status(client, args)
    elif args.command == 'list':
        return cmd_list(client, args)
    elif args.command == 'cancel':
        return cmd_cancel(client, args)
    elif args.command == 'history':
        return cmd_history(client, args)
    elif args.command == 'watch':
        return watch(client, args.job_id, None, args)

    parser.error(f"Unknown command {args.command}")
    return 2


if __name__ == "__main__":
    sys.exit(main())
