from leadflow.sheets.store import Sheet, Spreadsheet, WorkbookSpreadsheet, WorksheetSheet

__all__ = ["Sheet", "Spreadsheet", "WorkbookSpreadsheet", "WorksheetSheet"]
