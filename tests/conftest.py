import sys
from pathlib import Path

import pytest

# 把仓库根目录加入 sys.path，未安装时也能导入 jsmon 包
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from jsmon.flags import build_flag_state  # noqa: E402


@pytest.fixture
def flags():
    """按命令行参数构建 FlagState"""
    def _build(*argv):
        return build_flag_state(list(argv), prog="jsmon")
    return _build


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch, tmp_path):
    # 避免读取或创建用户目录下的真实配置
    monkeypatch.setenv("JSMON_CONFIG", str(tmp_path / "config.txt"))
    monkeypatch.delenv("JSMON_API_KEY", raising=False)
    return tmp_path / "config.txt"
