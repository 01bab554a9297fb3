"""
meshnet-route 命令行测试。
"""

import io
import logging
import os
import shutil
import tempfile
import unittest
from contextlib import redirect_stdout, redirect_stderr

from meshnet.cli import main

MESH_YAML = """
topology: [ Mesh2D ]
npus_count: [ 12 ]
mesh_width: 4
mesh_height: 3
"""

DISCONNECTED_YAML = """
topology: [ SparseMesh2D ]
npus_count: [ 4 ]
mesh_width: 3
mesh_height: 2
excluded_coords: [ [1, 0], [1, 1] ]
"""


class TestCli(unittest.TestCase):
    """命令行测试类。"""

    def setUp(self):
        """设置测试环境。"""
        self.temp_dir = tempfile.mkdtemp()
        self.root_level = logging.getLogger().level

    def tearDown(self):
        """清理测试环境。"""
        shutil.rmtree(self.temp_dir)
        logging.getLogger().setLevel(self.root_level)

    def write(self, content):
        path = os.path.join(self.temp_dir, "network.yml")
        with open(path, "w", encoding="utf-8") as f:
            f.write(content)
        return path

    def run_cli(self, *argv):
        stdout, stderr = io.StringIO(), io.StringIO()
        with redirect_stdout(stdout), redirect_stderr(stderr):
            code = main(list(argv))
        return code, stdout.getvalue(), stderr.getvalue()

    def test_route(self):
        """测试查询单条路由。"""
        code, out, _ = self.run_cli(self.write(MESH_YAML), "--src", "0", "--dest", "11", "--show-grid")
        self.assertEqual(code, 0)
        self.assertIn("路由: 0(0,0) -> 1(1,0) -> 2(2,0) -> 3(3,0) -> 7(3,1) -> 11(3,2)", out)
        self.assertIn("跳数: 5", out)
        self.assertIn("  8 ---   9 ---  10 ---  11", out)

    def test_all_pairs_and_trace(self):
        """测试所有NPU对统计与事件输出。"""
        code, out, _ = self.run_cli(self.write(MESH_YAML), "--all-pairs", "--trace")
        self.assertEqual(code, 0)
        self.assertIn("NPU对数: 132", out)
        self.assertIn("最大跳数: 5", out)
        self.assertIn("[topology_built]", out)

    def test_no_route(self):
        """测试不可达时返回错误码。"""
        code, _, err = self.run_cli(self.write(DISCONNECTED_YAML), "--src", "0", "--dest", "1")
        self.assertEqual(code, 1)
        self.assertIn("错误", err)

    def test_missing_file(self):
        """测试配置文件不存在。"""
        code, _, err = self.run_cli(os.path.join(self.temp_dir, "missing.yml"))
        self.assertEqual(code, 1)
        self.assertIn("配置文件不存在", err)


if __name__ == "__main__":
    unittest.main(verbosity=2)
