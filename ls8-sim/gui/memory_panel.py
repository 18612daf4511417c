from PySide6.QtCore import QAbstractTableModel, Qt, QModelIndex, QTimer
from PySide6.QtGui import QColor
from PySide6.QtWidgets import (QTableView, QWidget, QVBoxLayout, QLabel, QHBoxLayout,
                              QPushButton, QInputDialog, QMessageBox, QTextEdit, QGroupBox,
                              QFileDialog)
from ls8.assembler import AssemblyError, assemble
from ls8.loader import ProgramLoadError, load_file, load_program
from ls8.memory import MEM_SIZE
from ls8.opcodes import disassemble

class MemoryModel(QAbstractTableModel):
    """256 바이트 메모리를 테이블로 노출 (값 + 디스어셈블). 값 열만 편집 가능."""
    HEADERS = ["Value", "Decoded"]

    def __init__(self, cpu, parent=None):
        super().__init__(parent)
        self.cpu = cpu

    def rowCount(self, parent=QModelIndex()):
        return MEM_SIZE

    def columnCount(self, parent=QModelIndex()):
        return len(self.HEADERS)

    def data(self, index, role=Qt.DisplayRole):
        if not index.isValid():
            return None
        addr = index.row()
        if index.column() == 0 and role in (Qt.DisplayRole, Qt.EditRole):
            return f"{self.cpu.mem.read(addr):02X}"
        if index.column() == 1 and role == Qt.DisplayRole:
            mem = self.cpu.mem
            return disassemble(mem.read(addr), mem.read(addr + 1), mem.read(addr + 2))
        if role == Qt.BackgroundRole and addr == self.cpu.reg.pc:
            return QColor(Qt.yellow)
        return None

    def headerData(self, section, orientation, role=Qt.DisplayRole):
        if role != Qt.DisplayRole:
            return None
        if orientation == Qt.Vertical:
            return f"{section:02X}"
        return self.HEADERS[section]

    def flags(self, index):
        if index.column() == 0:
            return Qt.ItemIsSelectable | Qt.ItemIsEnabled | Qt.ItemIsEditable
        return Qt.ItemIsSelectable | Qt.ItemIsEnabled

    def setData(self, index, value, role=Qt.EditRole):
        if role == Qt.EditRole and index.column() == 0:
            try:
                byte = int(value, 16)
            except ValueError:
                return False
            if not 0 <= byte <= 0xFF:
                return False
            self.cpu.mem.write(index.row(), byte)
            self.dataChanged.emit(index, index, [Qt.DisplayRole])
            return True
        return False


class MemoryPanel(QWidget):
    """스크롤 가능한 메모리 뷰와 편집 컨트롤."""
    def __init__(self, cpu, parent=None):
        super().__init__(parent)
        self.cpu = cpu

        layout = QVBoxLayout(self)

        instr_label = QLabel("Double-click a value to edit memory directly")
        layout.addWidget(instr_label)

        self.table_view = QTableView(self)
        self.table_view.setModel(MemoryModel(cpu, self))
        self.table_view.setSelectionBehavior(QTableView.SelectRows)
        self.table_view.verticalHeader().setDefaultSectionSize(20)
        self.table_view.horizontalHeader().setStretchLastSection(True)
        layout.addWidget(self.table_view)

        edit_layout = QHBoxLayout()

        self.btn_edit = QPushButton("Edit Address")
        self.btn_edit.clicked.connect(self.edit_address)
        edit_layout.addWidget(self.btn_edit)

        self.btn_load = QPushButton("Load Listing...")
        self.btn_load.clicked.connect(self.load_listing)
        edit_layout.addWidget(self.btn_load)

        layout.addLayout(edit_layout)

        # Assembly input group
        asm_group = QGroupBox("Assembly Input")
        asm_layout = QVBoxLayout()

        help_text = (
            "LS-8 assembler (one instruction per line, ; comments)\n"
            "--------------------------------------------------\n"
            "• LDI  R0, 8          ; 즉시값 (dec / 0x / 0b)\n"
            "• LD / ST  Ra, Rb     ; 메모리 접근 (주소는 레지스터)\n"
            "• ADD SUB MUL DIV MOD AND OR XOR CMP  Ra, Rb\n"
            "• INC DEC NOT PRN PUSH POP  Rn\n"
            "• JMP JEQ JNE JGT JLT CALL  Rn   ; 주소는 레지스터\n"
            "• RET  HLT  NOP\n"
            "※ 라벨은 지원하지 않음\n"
        )
        asm_layout.addWidget(QLabel(help_text))

        self.asm_text = QTextEdit()
        self.asm_text.setPlaceholderText("Enter assembly instructions here, one per line")
        asm_layout.addWidget(self.asm_text)

        asm_controls = QHBoxLayout()

        self.btn_start_addr = QPushButton("Set Start Address")
        self.btn_start_addr.clicked.connect(self.set_start_address)
        asm_controls.addWidget(self.btn_start_addr)

        self.btn_assemble = QPushButton("Assemble and Load")
        self.btn_assemble.clicked.connect(self.assemble_and_load)
        asm_controls.addWidget(self.btn_assemble)

        asm_layout.addLayout(asm_controls)
        asm_group.setLayout(asm_layout)
        layout.addWidget(asm_group)

        self.start_address = 0

        # 주기적 새로고침
        self.timer = QTimer(self)
        self.timer.timeout.connect(self.refresh)
        self.timer.start(500)  # ms

    def refresh(self):
        """Refresh the memory view"""
        self.table_view.model().layoutChanged.emit()

    def edit_address(self):
        """Edit a specific memory address"""
        addr, ok1 = QInputDialog.getInt(self, "Edit Memory",
                                        "Enter memory address (0-255):",
                                        0, 0, MEM_SIZE - 1)
        if not ok1:
            return

        current_val = self.cpu.mem.read(addr)
        value_str, ok2 = QInputDialog.getText(self, "Edit Memory",
                                              f"Enter new value for address {addr:02X} (hex):",
                                              text=f"{current_val:02X}")
        if ok2:
            try:
                value = int(value_str, 16)
                if not 0 <= value <= 0xFF:
                    raise ValueError(value)
                self.cpu.poke(addr, value)
                self.refresh()
            except ValueError:
                QMessageBox.warning(self, "Invalid Input",
                                    "Please enter a hexadecimal byte (00-FF).")

    def load_listing(self):
        path, _ = QFileDialog.getOpenFileName(self, "Load Program", "",
                                              "LS-8 listings (*.ls8);;All files (*)")
        if not path:
            return
        self.cpu.reset()
        try:
            count = load_file(self.cpu, path)
        except ProgramLoadError as e:
            QMessageBox.warning(self, "Load Error", str(e))
            return
        self.refresh()
        QMessageBox.information(self, "Program Loaded", f"{count} bytes loaded at 00")

    def set_start_address(self):
        """Set the start address for assembly code"""
        addr, ok = QInputDialog.getInt(self, "Assembly Start Address",
                                       "Enter start address for assembly (0-255):",
                                       self.start_address, 0, MEM_SIZE - 1)
        if ok:
            self.start_address = addr

    def assemble_and_load(self):
        """Assemble the code in the text box and load it into memory"""
        asm_text = self.asm_text.toPlainText().strip()
        if not asm_text:
            QMessageBox.warning(self, "Empty Input", "Please enter assembly code.")
            return

        try:
            program = assemble(asm_text)
            load_program(self.cpu, program, self.start_address)
        except (AssemblyError, ProgramLoadError) as e:
            QMessageBox.warning(self, "Assembly Errors", str(e))
            return

        self.refresh()
        QMessageBox.information(self, "Assembly Complete",
                                f"{len(program)} bytes loaded starting at address {self.start_address:02X}")
