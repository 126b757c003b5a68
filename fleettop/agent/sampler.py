# fleettop/agent/sampler.py
from __future__ import annotations

from typing import List

import psutil

from ..errors import CollectionError
from ..models import utcnow
from ..schemas import DiskStats, MemoryStats, MetricSnapshot, ProcessSample


class Sampler:
    """Takes one point-in-time snapshot of system and per-process metrics.

    CPU percentages are non-blocking: psutil compares against the counters
    from the previous call, so the constructor primes them once.
    """

    def __init__(self, disk_mount: str = "/"):
        self.disk_mount = disk_mount
        psutil.cpu_percent(interval=None, percpu=True)

    def capture(self) -> MetricSnapshot:
        try:
            cpu = psutil.cpu_percent(interval=None, percpu=True)
            vm = psutil.virtual_memory()
            du = psutil.disk_usage(self.disk_mount)
            procs = list(psutil.process_iter())
        except Exception as e:
            raise CollectionError(f"failed to read system metrics: {e}") from e

        return MetricSnapshot(
            timestamp=utcnow(),
            cpu_percentages=[float(c) for c in cpu],
            memory=MemoryStats(
                total=int(vm.total),
                available=int(vm.available),
                used=int(vm.used),
                free=int(vm.free),
                used_percent=float(vm.percent),
            ),
            disk=DiskStats(
                path=self.disk_mount,
                total=int(du.total),
                free=int(du.free),
                used=int(du.used),
                used_percent=float(du.percent),
            ),
            processes=self._processes(procs),
        )

    def _processes(self, procs) -> List[ProcessSample]:
        out: List[ProcessSample] = []
        for p in procs:
            name, cpu, mem = "", 0.0, 0.0
            # a process that exits or denies access mid-scan keeps zeroed fields
            try:
                with p.oneshot():
                    try:
                        name = p.name() or ""
                    except psutil.Error:
                        pass
                    try:
                        cpu = float(p.cpu_percent(interval=None))
                    except psutil.Error:
                        pass
                    try:
                        mem = float(p.memory_percent())
                    except psutil.Error:
                        pass
            except psutil.Error:
                pass
            out.append(ProcessSample(pid=p.pid, name=name, cpu_percent=cpu, memory_percent=mem))
        return out
