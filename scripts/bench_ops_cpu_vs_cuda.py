# scripts/bench_ops_cpu_vs_cuda.py
"""
Microbench: FusedVec engine ops (CPU vs CUDA).

What it measures
----------------
- Per-op latency of fused elementwise maps, fused reductions and the softmax
  kernels on the NumPy and the CuPy backends.
- Uses warmup iterations (not recorded), then repeats with median/p95.
- For CUDA, optionally synchronizes after each iteration so timings are accurate.

Notes
-----
- Inputs are allocated once and reused; maps run in place, so the values
  drift across iterations. Only timings are meaningful, except with --sanity,
  which compares one fresh run per op on both devices.

Example
-------
python -O scripts/bench_ops_cpu_vs_cuda.py --ops exp_affine log_sum softmax \
    --numel 1048576 --dtype float32 --warmup 20 --repeats 100 --sync_each_iter
"""

from __future__ import annotations

import argparse
import math
import statistics
import time
from dataclasses import dataclass
from typing import Callable, Dict, List, Sequence

import numpy as np

import os
import sys

THIS_DIR = os.path.dirname(os.path.abspath(__file__))
ROOT_DIR = os.path.abspath(os.path.join(THIS_DIR, ".."))
SRC_DIR = os.path.join(ROOT_DIR, "src")
if SRC_DIR not in sys.path:
    sys.path.insert(0, SRC_DIR)

from fusedvec import DeviceNotSupportedError, VectorEngine, create_engine  # noqa: E402


def _make_cuda_engine(device: str):
    try:
        return create_engine(device)
    except (DeviceNotSupportedError, FileNotFoundError, RuntimeError) as e:
        print(f"[WARN] CUDA not available ({e}); running CPU-only.")
        return None


# ----------------------------
# Stats helpers
# ----------------------------
def _median(xs: Sequence[float]) -> float:
    return statistics.median(xs) if xs else float("nan")


def _p95(xs: Sequence[float]) -> float:
    if not xs:
        return float("nan")
    ys = sorted(xs)
    k = int(math.ceil(0.95 * len(ys))) - 1
    k = max(0, min(k, len(ys) - 1))
    return ys[k]


def _fmt_ms(sec: float) -> str:
    return f"{sec * 1e3:8.3f} ms"


@dataclass
class OpResult:
    name: str
    cpu_med: float
    cpu_p95: float
    gpu_med: float
    gpu_p95: float


# ----------------------------
# Bench core
# ----------------------------
def _time_op(
    fn: Callable[[], object],
    eng: VectorEngine,
    *,
    warmup: int,
    repeats: int,
    sync_each_iter: bool,
) -> List[float]:
    for _ in range(warmup):
        fn()
        if sync_each_iter:
            eng.synchronize()

    times: List[float] = []
    for _ in range(repeats):
        t0 = time.perf_counter()
        fn()
        if sync_each_iter:
            eng.synchronize()
        t1 = time.perf_counter()
        times.append(t1 - t0)
    return times


def _build_ops(eng: VectorEngine, x, y) -> Dict[str, Callable[[], object]]:
    return {
        "exp": lambda: eng.exp(x, y),
        "exp_affine": lambda: eng.exp(x, y, a=0.5, b=-1.0, m=2.0),
        "linear_identity": lambda: eng.linear(x),
        "linear": lambda: eng.linear(x, y, a=1.5, b=0.25),
        "dot_multiply": lambda: eng.dot_multiply(x, y, y, scale=0.5),
        "sum": lambda: eng.sum(x),
        "max": lambda: eng.max(x),
        "log_sum": lambda: eng.log_sum(x, b=10.0),
        "square_sum": lambda: eng.square_sum(x),
        "softmax": lambda: eng.softmax(x, y),
        "softmax_log_prob": lambda: eng.softmax_log_prob_at_label(x, 0),
        "random_normal": lambda: eng.fill_random_normal(y),
    }


def _result_of(eng: VectorEngine, name: str, x, y, x_np: np.ndarray) -> np.ndarray:
    tmp = eng.from_numpy(x_np)
    eng.copy(tmp, x)
    eng.free(tmp)
    out = _build_ops(eng, x, y)[name]()
    if out is y:
        return eng.to_numpy(y)
    if out is x or out is None:
        return eng.to_numpy(x)
    return np.asarray(out, dtype=np.float64)


def main() -> None:
    ap = argparse.ArgumentParser()
    ap.add_argument("--numel", type=int, default=1 << 20)
    ap.add_argument("--dtype", choices=["float32", "float64"], default="float32")
    ap.add_argument("--warmup", type=int, default=20)
    ap.add_argument("--repeats", type=int, default=100)
    ap.add_argument(
        "--sync_each_iter",
        action="store_true",
        help="synchronize the device after each iter",
    )
    ap.add_argument("--cuda_device", default="cuda:0")
    ap.add_argument(
        "--ops",
        nargs="*",
        default=["exp", "exp_affine", "linear_identity", "sum", "log_sum", "softmax"],
    )
    ap.add_argument(
        "--sanity",
        action="store_true",
        help="Run correctness check (CPU vs CUDA) once per op",
    )
    args = ap.parse_args()

    dtype = np.dtype(args.dtype)
    n = int(args.numel)

    print("=" * 96)
    print(
        f"FusedVec ops CPU vs CUDA bench | numel={n} dtype={dtype} warmup={args.warmup} repeats={args.repeats} sync_each_iter={args.sync_each_iter}"
    )
    print("=" * 96)

    rng = np.random.default_rng(0)
    x_np = (rng.standard_normal(size=n) * 0.25).astype(dtype)

    cpu = create_engine("cpu")
    x_cpu = cpu.from_numpy(x_np)
    y_cpu = cpu.allocate(n, dtype, zero_fill=True)
    cpu_ops = _build_ops(cpu, x_cpu, y_cpu)

    gpu = _make_cuda_engine(args.cuda_device)
    have_cuda = gpu is not None
    if have_cuda:
        x_gpu = gpu.from_numpy(x_np)
        y_gpu = gpu.allocate(n, dtype, zero_fill=True)
        gpu_ops = _build_ops(gpu, x_gpu, y_gpu)

    selected = [op for op in args.ops if op in cpu_ops]
    if not selected:
        raise SystemExit(f"No valid ops selected. Choose from: {' '.join(cpu_ops)}")

    results: List[OpResult] = []
    for name in selected:
        cpu_times = _time_op(
            cpu_ops[name], cpu, warmup=args.warmup, repeats=args.repeats, sync_each_iter=False
        )
        cpu_med, cpu_p95 = _median(cpu_times), _p95(cpu_times)

        if have_cuda:
            gpu_times = _time_op(
                gpu_ops[name],
                gpu,
                warmup=args.warmup,
                repeats=args.repeats,
                sync_each_iter=args.sync_each_iter,
            )
            gpu_med, gpu_p95 = _median(gpu_times), _p95(gpu_times)
        else:
            gpu_med, gpu_p95 = float("nan"), float("nan")

        if args.sanity and have_cuda and name != "random_normal":
            cpu_arr = _result_of(cpu, name, x_cpu, y_cpu, x_np)
            gpu_arr = _result_of(gpu, name, x_gpu, y_gpu, x_np)
            atol = 1e-5 if dtype == np.float32 else 1e-10
            rtol = 1e-4 if dtype == np.float32 else 1e-9
            if not np.allclose(cpu_arr, gpu_arr, rtol=rtol, atol=atol):
                max_abs = float(np.max(np.abs(cpu_arr - gpu_arr)))
                raise AssertionError(f"[sanity] {name} mismatch: max_abs={max_abs}")

        results.append(OpResult(name, cpu_med, cpu_p95, gpu_med, gpu_p95))

    print("\nResults (median / p95):")
    print("-" * 96)
    hdr = f"{'op':18s} | {'cpu_med':>12s} {'cpu_p95':>12s} | {'gpu_med':>12s} {'gpu_p95':>12s} | {'speedup':>8s}"
    print(hdr)
    print("-" * 96)
    for r in results:
        speedup = r.cpu_med / r.gpu_med if have_cuda and r.gpu_med > 0 else float("nan")
        print(
            f"{r.name:18s} | {_fmt_ms(r.cpu_med):>12s} {_fmt_ms(r.cpu_p95):>12s} | "
            f"{_fmt_ms(r.gpu_med):>12s} {_fmt_ms(r.gpu_p95):>12s} | {speedup:8.2f}x"
        )
    print("-" * 96)


if __name__ == "__main__":
    main()
