"""
Timed MKLHS demo: keygen, signing and evaluation for a set of signers.

    python -m mklhs --signers 3 --messages 4 --iterations 6 --output results.json

Each signer signs ``--messages`` messages under fresh tags; the evaluator
then combines every share with the coefficients 1, 2, 3, ...
"""

import argparse
import logging
import time

import numpy as np

from mklhs.config import load_config, save_values
from mklhs.encoding import aggregate_to_dict, program_to_dict
from mklhs.models import LabeledProgram
from mklhs.params import Params
from mklhs.protocol import evaluate, keygen, sign
from mklhs.rng import DeterministicRandom, default_rng, random_bytes, random_scalar

logger = logging.getLogger("mklhs")


def _elapsed_ms(start_time):
    return (time.perf_counter_ns() - start_time) / 1_000_000


def run_once(pp, signers, messages, rng):
    """Run one keygen/sign/evaluate round. Returns (timings in ms, program, aggregate)."""
    timings = {}

    # Step 1: Key generation
    start_time = time.perf_counter_ns()
    keys = [keygen(pp, rng) for _ in range(signers)]
    timings["keygen"] = _elapsed_ms(start_time)

    # Step 2: Signing, one fresh tag per message
    start_time = time.perf_counter_ns()
    labels, shares = [], []
    for sk, _ in keys:
        for _ in range(messages):
            label = pp.label(sk.id, random_bytes(rng, pp.k))
            msg = random_scalar(rng, pp.order)
            labels.append(label)
            shares.append(sign(pp, sk, label, msg))
    timings["sign"] = _elapsed_ms(start_time)

    # Step 3: Evaluation
    program = LabeledProgram(list(range(1, len(labels) + 1)), labels)
    start_time = time.perf_counter_ns()
    aggr = evaluate(pp, program, shares)
    timings["evaluate"] = _elapsed_ms(start_time)

    return timings, program, aggr


def summarize(execution_times):
    """Mean and standard deviation per phase, dropping the first and last run when there are more than two."""
    trimmed_times = execution_times[1:-1] if len(execution_times) > 2 else execution_times
    summary = {}
    for phase in ("keygen", "sign", "evaluate"):
        values = [t[phase] for t in trimmed_times]
        summary[phase] = {"mean_ms": float(np.mean(values)), "std_ms": float(np.std(values))}
    return summary


def run_demo(signers=3, messages=4, iterations=1, pp=None, rng=None):
    if signers <= 0 or messages <= 0 or iterations <= 0:
        raise ValueError("signers, messages and iterations must be positive")

    pp = pp if pp is not None else Params()
    rng = rng if rng is not None else default_rng()

    execution_times = []
    program = aggr = None
    for i in range(iterations):
        timings, program, aggr = run_once(pp, signers, messages, rng)
        logger.info(f"Iteration {i + 1}/{iterations}: {timings}")
        execution_times.append(timings)

    return {
        "params": {"id_length": pp.k, "dst_hex": pp.dst.hex()},
        "signers": signers,
        "messages_per_signer": messages,
        "execution_times": execution_times,
        "summary": summarize(execution_times),
        "program": program_to_dict(program),
        "aggregate": aggregate_to_dict(aggr),
    }


def build_parser():
    parser = argparse.ArgumentParser(prog="mklhs", description="MKLHS keygen/sign/evaluate demo")
    parser.add_argument("--signers", type=int, default=3)
    parser.add_argument("--messages", type=int, default=4, help="messages per signer")
    parser.add_argument("--iterations", type=int, default=1)
    parser.add_argument("--config", default=None, help="JSON parameter file")
    parser.add_argument("--seed", default=None, help="deterministic seed (NOT secure)")
    parser.add_argument("--output", default=None, help="write results to this JSON file")
    parser.add_argument("--log-level", default="INFO")
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=args.log_level.upper(), format="%(asctime)s %(name)s %(levelname)s %(message)s")

    pp = Params.from_config(load_config(args.config))
    rng = DeterministicRandom(args.seed) if args.seed is not None else None
    results = run_demo(args.signers, args.messages, args.iterations, pp=pp, rng=rng)

    for phase, stats in results["summary"].items():
        print(f"{phase:>8}: {stats['mean_ms']:.2f} ms (std {stats['std_ms']:.2f} ms)")
    print(f"Signers in aggregate: {len(results['aggregate']['ord_ids'])}")

    if args.output:
        save_values(args.output, results)
        print(f"Values saved to {args.output}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
