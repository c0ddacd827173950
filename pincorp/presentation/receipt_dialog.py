# pincorp/presentation/receipt_dialog.py

from PyQt5.QtWidgets import (QDialog, QVBoxLayout, QHBoxLayout, QPushButton, QTextBrowser,
                             QMessageBox, QFileDialog, QApplication)
from PyQt5.QtPrintSupport import QPrinter, QPrintDialog
from weasyprint import HTML

from pincorp.business_logic.entities.sale_entity import SaleEntity
from pincorp.presentation.receipt_renderer import build_receipt_html, build_receipt_text
import logging

logger = logging.getLogger(__name__)


def export_receipt_pdf(sale: SaleEntity, file_path: str) -> None:
    HTML(string=build_receipt_html(sale)).write_pdf(file_path)
    logger.info(f"Receipt for sale {sale.id} written to {file_path}")


class ReceiptDialog(QDialog):
    def __init__(self, sale: SaleEntity, parent=None):
        super().__init__(parent)
        self.sale = sale
        self.setWindowTitle(f"Hóa đơn {sale.id}")
        self.setMinimumSize(420, 560)

        layout = QVBoxLayout(self)
        self.receipt_browser = QTextBrowser(self)
        self.receipt_browser.setHtml(build_receipt_html(sale))
        layout.addWidget(self.receipt_browser)

        button_layout = QHBoxLayout()
        self.print_button = QPushButton("In hóa đơn")
        self.pdf_button = QPushButton("Xuất PDF")
        self.copy_text_button = QPushButton("Sao chép")
        self.close_button = QPushButton("Đóng")
        for button in (self.print_button, self.pdf_button, self.copy_text_button):
            button_layout.addWidget(button)
        button_layout.addStretch()
        button_layout.addWidget(self.close_button)
        layout.addLayout(button_layout)

        self.print_button.clicked.connect(self._handle_print)
        self.pdf_button.clicked.connect(self._handle_pdf_export)
        self.copy_text_button.clicked.connect(self._handle_copy_text)
        self.close_button.clicked.connect(self.accept)

    def _handle_print(self):
        printer = QPrinter(QPrinter.PrinterMode.HighResolution)
        dialog = QPrintDialog(printer, self)
        if dialog.exec_() == QDialog.DialogCode.Accepted:
            self.receipt_browser.document().print_(printer)
            logger.info(f"Receipt for sale {self.sale.id} sent to printer.")

    def _handle_pdf_export(self):
        default_filename = f"HoaDon_{self.sale.id}.pdf"
        file_path, _ = QFileDialog.getSaveFileName(self, "Lưu hóa đơn PDF", default_filename, "PDF Files (*.pdf)")
        if not file_path:
            return
        try:
            export_receipt_pdf(self.sale, file_path)
            QMessageBox.information(self, "Thành công", f"Đã lưu hóa đơn PDF:\n{file_path}")
        except Exception as e:
            logger.error(f"Error generating PDF with WeasyPrint: {e}", exc_info=True)
            QMessageBox.critical(self, "Lỗi xuất PDF", f"Không thể tạo PDF:\n{e}")

    def _handle_copy_text(self):
        clipboard = QApplication.clipboard()
        if clipboard:
            clipboard.setText(build_receipt_text(self.sale))
            QMessageBox.information(self, "Đã sao chép", "Nội dung hóa đơn đã được sao chép.")
