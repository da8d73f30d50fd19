"""python -m easyapplyagent：按 config.yaml + .env 跑一次完整流程。"""

from __future__ import annotations

import sys

from .core.workflow import run_workflow


def main() -> int:
    result = run_workflow()
    return 0 if result.success else 1


if __name__ == "__main__":
    sys.exit(main())
