from PySide6.QtWidgets import QWidget, QLabel, QLineEdit, QGridLayout, QMessageBox
from PySide6.QtCore import Qt, QTimer, Slot
from ls8.registers import GENERAL_REGS, SPECIAL_REGS, IM, IS, SP

RESERVED = {IM: "IM", IS: "IS", SP: "SP"}

class RegisterPanel(QWidget):
    """
    8 개 GPR + PC/IR/FL 을 그리드로 표시.
    200 ms 간격 QTimer 로 값 반영. GPR 은 16진수로 직접 수정 가능.
    """
    def __init__(self, cpu, parent=None):
        super().__init__(parent)
        self.cpu = cpu
        self.edits = []

        layout = QGridLayout(self)

        # 일반 레지스터 R0–R7 (R5-R7 은 IM/IS/SP)
        for i in range(GENERAL_REGS):
            name = f"R{i}" + (f" ({RESERVED[i]})" if i in RESERVED else "")
            lbl = QLabel(name)
            edit = QLineEdit()
            edit.setAlignment(Qt.AlignRight)
            edit.editingFinished.connect(self.register_edited)
            edit.setObjectName(f"R{i}")
            layout.addWidget(lbl, i, 0)
            layout.addWidget(edit, i, 1)
            self.edits.append(edit)

        # 특수 레지스터
        for row, name in enumerate(SPECIAL_REGS, GENERAL_REGS):
            lbl = QLabel(name)
            edit = QLineEdit()
            edit.setReadOnly(True)
            edit.setAlignment(Qt.AlignRight)
            layout.addWidget(lbl, row, 0)
            layout.addWidget(edit, row, 1)
            self.edits.append(edit)

        layout.setColumnStretch(1, 1)

        # Flag to prevent editing during update
        self.updating = False

        # 주기적 업데이트
        self.timer = QTimer(self)
        self.timer.timeout.connect(self.update_view)
        self.timer.start(200)   # ms

    def update_view(self):
        """Update register display from CPU state"""
        self.updating = True
        for i in range(GENERAL_REGS):
            # NOT may leave a negative value behind; show its low byte
            self.edits[i].setText(f"{self.cpu.reg[i] & 0xFF:02X}")
        specials = [self.cpu.reg.pc, self.cpu.reg.ir, self.cpu.reg.fl]
        for j, val in enumerate(specials, start=GENERAL_REGS):
            self.edits[j].setText(f"{val:02X}")
        self.updating = False

    @Slot()
    def register_edited(self):
        """Handle direct editing of register values"""
        if self.updating:
            return

        sender = self.sender()
        if not sender:
            return

        try:
            reg_idx = int(sender.objectName()[1:])  # "R0" -> 0
            value = int(sender.text(), 16)
            if not 0 <= value <= 0xFF:
                raise ValueError(value)
            self.cpu.reg[reg_idx] = value
        except ValueError:
            QMessageBox.warning(self, "Invalid Input",
                                "Please enter a hexadecimal byte (00-FF).")
            self.update_view()  # Reset to current value
