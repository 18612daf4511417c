from PySide6.QtWidgets import (QWidget, QPushButton, QHBoxLayout, QVBoxLayout,
                               QLabel, QPlainTextEdit)
from PySide6.QtCore import QTimer

class ControlPanel(QWidget):
    """
    Step / Run / Pause / Reset 버튼, 상태 레이블, 출력 로그.
    Run 시 QTimer 로 CPU.step() 을 주기적으로 호출.
    """
    def __init__(self, cpu, mem_view, interval_ms=50, parent=None):
        super().__init__(parent)
        self.cpu = cpu
        self.mem_view = mem_view

        self.btn_step  = QPushButton("Step")
        self.btn_run   = QPushButton("Run")
        self.btn_pause = QPushButton("Pause")
        self.btn_reset = QPushButton("Reset")
        self.status    = QLabel("Stopped")

        self.log = QPlainTextEdit()
        self.log.setReadOnly(True)
        self.log.setPlaceholderText("PRN output")

        buttons = QHBoxLayout()
        for b in (self.btn_step, self.btn_run,
                  self.btn_pause, self.btn_reset, self.status):
            buttons.addWidget(b)
        lay = QVBoxLayout(self)
        lay.addLayout(buttons)
        lay.addWidget(self.log)

        # connections
        self.btn_step.clicked.connect(self.step_once)
        self.btn_run.clicked.connect(self.run)
        self.btn_pause.clicked.connect(self.pause)
        self.btn_reset.clicked.connect(self.reset)

        # timer for continuous run
        self.timer = QTimer(self)
        self.timer.timeout.connect(self.step_once)
        self.timer.setInterval(interval_ms)

    def append_output(self, line: str):
        self.log.appendPlainText(line)

    def step_once(self):
        if self.cpu.halted:
            self.timer.stop()
            self.status.setText("Halted")
            return
        self.cpu.step()
        self.mem_view.refresh()
        if self.cpu.halted:
            self.timer.stop()
            self.status.setText(str(self.cpu.fault) if self.cpu.fault else "Halted")
        else:
            self.status.setText(f"PC={self.cpu.reg.pc:02X}")

    def run(self):
        self.timer.start()
        self.status.setText("Running")

    def pause(self):
        self.timer.stop()
        self.status.setText("Paused")

    def reset(self):
        self.timer.stop()
        self.cpu.reset()
        self.log.clear()
        self.mem_view.refresh()
        self.status.setText("Reset OK")
