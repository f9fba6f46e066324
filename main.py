"""Main entry point for the taskpace forecasting and daily planning engine."""

import argparse
import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import List

import yaml

from taskpace.engine.allocator import DailyAllocator
from taskpace.engine.forecaster import Forecaster
from taskpace.engine.planner import DailyPlanner
from taskpace.engine.store import JsonFileStore
from taskpace.engine.windows import allowed_window, next_prompt_time, window_settings
from taskpace.estimation.required_time import recommend_start, required_minutes
from taskpace.evaluation.generator import TaskGenerator
from taskpace.evaluation.simulator import PolicySimulator
from taskpace.forecast.guidance import resolve_guidance
from taskpace.forecast.risk import resolve_risk_display
from taskpace.models.task import Task
from taskpace.policies import get_policy
from taskpace.utils.config import get_default_config, load_config
from taskpace.utils.datetime_utils import day_key, get_timezone, to_instant

logger = logging.getLogger("taskpace")


def resolve_now(value: str, tz) -> datetime:
    """Parse --now, defaulting to the current time."""
    if not value:
        return datetime.now(tz)
    now = to_instant(value, tz)
    if now is None:
        raise ValueError(f"Invalid --now value: {value}")
    return now


def load_tasks(path: str, config: dict, now: datetime) -> List[Task]:
    """Load tasks from a JSON/YAML list, or generate a synthetic set."""
    tz = get_timezone(config.get('timezone'))
    if not path:
        generator = TaskGenerator(seed=config.get('evaluation', {}).get('seed', 42), config=config)
        return generator.generate_task_stream(now)

    task_path = Path(path)
    with open(task_path, 'r', encoding='utf-8') as f:
        if task_path.suffix.lower() in ['.yaml', '.yml']:
            records = yaml.safe_load(f) or []
        else:
            records = json.load(f)
    return [Task.from_record(record, tz) for record in records]


def run_forecast(config: dict, tasks: List[Task], now: datetime):
    """Recompute forecasts and print a summary per task."""
    forecaster = Forecaster(JsonFileStore("results"), config)
    report = forecaster.refresh(tasks, now)

    print(f"\nForecast for {len(tasks)} tasks ({len(report.updated)} updated, "
          f"{len(report.failed)} failed)")
    for task in tasks:
        if task.forecast is None:
            continue
        display = resolve_risk_display(task, now)
        f = task.forecast
        print(f"  {task.task_id:<10} {display.label:<16} pace7d={f.pace_7d:<6} "
              f"required={f.required_pace:<6} spi={f.spi_7d:<5} eac={f.eac_date}")
    return report


def run_plan(config: dict, tasks: List[Task], now: datetime, policy_name: str, cap: float, user: str):
    """Compute and persist today's plan."""
    policy = get_policy(policy_name, config)
    allocator = DailyAllocator(policy, config)
    Forecaster(config=config).refresh(tasks, now)

    plan, trace = allocator.allocate(tasks, now, cap=cap)

    planner = DailyPlanner(JsonFileStore("results"), allocator, config)
    result = planner.refresh(user, tasks, now) if cap is None else None

    print(f"\nDaily plan for {plan.day} using {policy_name.upper()} policy "
          f"({plan.total_planned_minutes}/{plan.cap_minutes} min)")
    for item in plan.items:
        print(f"  {item.order}. {item.task_id:<10} {item.planned_minutes:>4} min  {item.title}")
    if result is not None:
        print(f"\n{result.message}")

    results_dir = Path("results")
    results_dir.mkdir(exist_ok=True)
    trace_path = results_dir / f"trace_{trace.run_id}.json"
    with open(trace_path, 'w') as f:
        json.dump(trace.to_dict(), f, indent=2, default=str)

    log_path = results_dir / f"trace_{trace.run_id}.log"
    with open(log_path, 'w') as f:
        f.write(trace.to_human_readable())

    print(f"Trace saved to: {trace_path}")
    return plan, trace


def run_guidance(config: dict, tasks: List[Task], now: datetime):
    """Print today's minutes needed per task to improve its risk level."""
    tz = get_timezone(config.get('timezone'))
    Forecaster(config=config).refresh(tasks, now)
    risk_mode = config.get('estimation', {}).get('risk_mode', 'mean')
    default_weight = config.get('estimation', {}).get('default_uncertainty', 3)
    notify_window, work_hours = window_settings(config)

    print(f"\nGuidance for {day_key(now, tz)}")
    for task in tasks:
        risk = task.forecast.risk_level if task.forecast else None
        guidance = resolve_guidance(task.deadline, task.remaining_minutes, risk, now, tz)
        if not guidance.available:
            print(f"  {task.task_id:<10} no guidance")
            continue
        required = required_minutes(task, risk_mode, default_weight)
        start = recommend_start(task, required.minutes, notify_window, work_hours, tz)
        print(f"  {task.task_id:<10} risk={risk or 'none':<5} "
              f"warn>={guidance.required_minutes_for_warn} ok>={guidance.required_minutes_for_ok} "
              f"T_req={required.minutes} start={start.isoformat() if start else '-'}")


def run_window(config: dict, now: datetime):
    """Print the allowed prompt window for today."""
    tz = get_timezone(config.get('timezone'))
    notify_window, work_hours = window_settings(config)
    window = allowed_window(day_key(now, tz), notify_window, work_hours, tz)
    if window.empty:
        print("\nNo prompt window today")
    else:
        print(f"\nPrompt window: {window.start.isoformat()} - {window.end.isoformat()} "
              f"({window.minutes} min)")
    upcoming = next_prompt_time(now, notify_window, work_hours, tz)
    print(f"Next prompt: {upcoming.isoformat() if upcoming else 'none within a week'}")


def run_evaluation(config: dict, tasks: List[Task], now: datetime):
    """Compare the deadline baseline with the lag-score policy."""
    simulator = PolicySimulator(config)
    baseline, lag_score = simulator.compare(tasks, now)

    results_dir = Path("results")
    results_dir.mkdir(exist_ok=True)
    comparison = {
        'baseline': baseline.to_dict(),
        'lag_score': lag_score.to_dict(),
    }
    with open(results_dir / 'evaluation_results.json', 'w') as f:
        json.dump(comparison, f, indent=2, default=str)

    print("\n" + "=" * 70)
    print("EVALUATION RESULTS COMPARISON")
    print("=" * 70)
    print(f"\n{'Metric':<40} {'Deadline':<15} {'Lag-Score':<15}")
    print("-" * 70)
    b, s = baseline.to_dict(), lag_score.to_dict()
    print(f"{'On-time rate (%)':<40} {b['on_time_rate_percent']:<15.2f} {s['on_time_rate_percent']:<15.2f}")
    print(f"{'Late tasks':<40} {b['tasks_late']:<15} {s['tasks_late']:<15}")
    print(f"{'Planned minutes':<40} {b['planned_minutes']:<15} {s['planned_minutes']:<15}")
    print("\n" + "=" * 70)
    return baseline, lag_score


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Adaptive progress forecasting and daily capacity planning"
    )
    parser.add_argument(
        'command',
        choices=['forecast', 'plan', 'guidance', 'window', 'evaluate', 'generate-tasks'],
        help='Command to run'
    )
    parser.add_argument('--config', type=str, default='config.yaml',
                        help='Path to configuration file (default: config.yaml)')
    parser.add_argument('--tasks', type=str, default=None,
                        help='JSON/YAML task list (default: generated tasks)')
    parser.add_argument('--policy', type=str, choices=['lag-score', 'deadline'], default='lag-score',
                        help='Allocation policy to use (default: lag-score)')
    parser.add_argument('--cap', type=float, default=None, help='Capacity override in minutes')
    parser.add_argument('--user', type=str, default='local', help='User id for stored plans')
    parser.add_argument('--now', type=str, default=None, help='ISO timestamp to use as the current time')
    parser.add_argument('--log-level', type=str, default='WARNING', help='Logging level')

    args = parser.parse_args()
    logging.basicConfig(level=args.log_level.upper(),
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    config = load_config(args.config) if Path(args.config).exists() else get_default_config()
    tz = get_timezone(config.get('timezone'))

    try:
        now = resolve_now(args.now, tz)
    except ValueError as exc:
        parser.error(str(exc))

    Path("results").mkdir(exist_ok=True)
    tasks = load_tasks(args.tasks, config, now)
    logger.info("loaded %d tasks", len(tasks))

    if args.command == 'forecast':
        run_forecast(config, tasks, now)
    elif args.command == 'plan':
        run_plan(config, tasks, now, args.policy, args.cap, args.user)
    elif args.command == 'guidance':
        run_guidance(config, tasks, now)
    elif args.command == 'window':
        run_window(config, now)
    elif args.command == 'evaluate':
        run_evaluation(config, tasks, now)
    elif args.command == 'generate-tasks':
        path = Path("results") / "generated_tasks.json"
        with open(path, 'w') as f:
            json.dump([t.to_record() for t in tasks], f, indent=2)
        print(f"Generated {len(tasks)} tasks")
        print(f"Tasks saved to: {path}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
