from PySide6.QtWidgets import QMainWindow, QDockWidget, QApplication
from PySide6.QtCore import Qt
from .register_panel import RegisterPanel
from .memory_panel import MemoryPanel
from .control_panel import ControlPanel
from ls8.config import SimConfig
from ls8.cpu_core import CPU
from ls8.loader import load_file
import sys

class MainWindow(QMainWindow):
    def __init__(self, config=None):
        super().__init__()
        self.config = config or SimConfig()
        self.cpu = CPU(output=self.on_output, mask_not=self.config.mask_not)
        self.setWindowTitle("LS-8 Simulator")

        # 중앙 위젯: 메모리
        self.memory_panel = MemoryPanel(self.cpu)
        self.setCentralWidget(self.memory_panel)

        # Dock 1 : 레지스터
        reg_dock = QDockWidget("Registers", self)
        reg_dock.setWidget(RegisterPanel(self.cpu))
        self.addDockWidget(Qt.LeftDockWidgetArea, reg_dock)

        # Dock 2 : 컨트롤 + 출력
        self.control_panel = ControlPanel(self.cpu, self.memory_panel,
                                          interval_ms=self.config.interval_ms)
        ctrl_dock = QDockWidget("Control", self)
        ctrl_dock.setWidget(self.control_panel)
        self.addDockWidget(Qt.BottomDockWidgetArea, ctrl_dock)

        if self.config.program_path is not None:
            load_file(self.cpu, self.config.program_path)
            self.memory_panel.refresh()

    def on_output(self, line: str):
        """PRN lines and fault reports from the CPU"""
        self.control_panel.append_output(line)


def run(config=None) -> int:
    app = QApplication(sys.argv)
    mw = MainWindow(config)
    mw.resize(960, 720)
    mw.show()
    return app.exec()
