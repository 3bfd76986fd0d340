import logging
import traceback

import tkinter as tk
from tkinter import messagebox, ttk

from PIL import Image, ImageTk

from dojo_attendance.constants import (
    APP_NAME,
    CLUB_NAME,
    DEFAULT_FEE,
    ABSENCE_MARKER,
    STATE_FILE,
    RECORDS_FOLDER,
    LOGO_FILE,
    WINDOW_WIDTH,
    WINDOW_HEIGHT,
    TITLE_FONT,
    DEFAULT_FONT,
)
from dojo_attendance.export import export_csv, export_spreadsheet
from dojo_attendance.ledger import (
    absence_total,
    clear_month,
    days_in_month,
    go_next_month,
    go_previous_month,
    month_key,
    set_view,
    student_days,
    toggle_day,
)
from dojo_attendance.roster import absence_count, add_students, mark_absence, remove_student
from dojo_attendance.storage import load_state, save_state

logger = logging.getLogger(__name__)


class AttendanceApp:
    def __init__(self, master, state_file=STATE_FILE, records_folder=RECORDS_FOLDER):
        self.master = master
        self.state_file = state_file
        self.records_folder = records_folder
        self.state = load_state(state_file)

        master.title(f"{APP_NAME} - {CLUB_NAME}")
        master.geometry(f"{WINDOW_WIDTH}x{WINDOW_HEIGHT}")
        master.configure(bg="#0d3b24")
        master.option_add('*Font', DEFAULT_FONT)

        try:
            logo = Image.open(LOGO_FILE).resize((90, 90))
            self.logo_image = ImageTk.PhotoImage(logo)
            tk.Label(master, image=self.logo_image, bg="#0d3b24").pack(pady=(8, 0))
        except OSError:
            pass

        tk.Label(
            master, text=CLUB_NAME, font=TITLE_FONT,
            fg="#facc15", bg="#0d3b24", pady=6
        ).pack()

        button_style = {"font": ("Arial", 11), "relief": "raised", "bd": 1, "padx": 8, "pady": 3}

        body = tk.Frame(master, bg="#0d3b24")
        body.pack(fill="both", expand=True, padx=10, pady=10)

        # ---------------- roster ----------------
        roster_frame = tk.Frame(body, bg="#0d3b24")
        roster_frame.pack(side="left", fill="y", padx=(0, 10))

        entry_frame = tk.Frame(roster_frame, bg="#0d3b24")
        entry_frame.pack(fill="x", pady=3)

        self.name_entry = tk.Entry(entry_frame, font=("Arial", 11), bg="#ecf0f1", width=24)
        self.name_entry.pack(side="left", padx=3)
        self.name_entry.bind("<Return>", lambda event: self.add_students())

        tk.Button(
            entry_frame, text="Add", **button_style,
            command=self.add_students, bg="#facc15", fg="black"
        ).pack(side="left", padx=3)

        self.student_listbox = tk.Listbox(
            roster_frame, font=("Arial", 11), width=38, height=16,
            bg="#ecf0f1", fg="#2c3e50",
            selectbackground="#3498db", selectforeground="white"
        )
        self.student_listbox.pack(fill="y", expand=True, pady=3)

        roster_buttons = tk.Frame(roster_frame, bg="#0d3b24")
        roster_buttons.pack(pady=3)

        tk.Button(
            roster_buttons, text="Mark absence", **button_style,
            command=self.mark_absence, bg="#facc15", fg="black"
        ).grid(row=0, column=0, padx=3, pady=3)

        tk.Button(
            roster_buttons, text="Remove", **button_style,
            command=self.remove_student, bg="#e74c3c", fg="white"
        ).grid(row=0, column=1, padx=3, pady=3)

        tk.Button(
            roster_buttons, text="Export Excel", **button_style,
            command=self.export_spreadsheet, bg="#d35400", fg="white"
        ).grid(row=0, column=2, padx=3, pady=3)

        # ---------------- monthly grid ----------------
        grid_frame = tk.Frame(body, bg="white")
        grid_frame.pack(side="left", fill="both", expand=True)

        nav_frame = tk.Frame(grid_frame, bg="white")
        nav_frame.pack(fill="x", pady=3)

        tk.Button(nav_frame, text="◀", command=self.previous_month).pack(side="left", padx=3)
        self.month_label = tk.Label(nav_frame, font=("Arial", 12, "bold"), bg="white", width=9)
        self.month_label.pack(side="left", padx=3)
        tk.Button(nav_frame, text="▶", command=self.next_month).pack(side="left", padx=3)

        self.year_var = tk.IntVar(value=self.state.view.year)
        self.month_var = tk.IntVar(value=self.state.view.month)
        tk.Label(nav_frame, text="Year", bg="white").pack(side="left", padx=(12, 3))
        year_spinbox = tk.Spinbox(
            nav_frame, from_=1, to=9999, width=6, textvariable=self.year_var,
            command=self.apply_view
        )
        year_spinbox.pack(side="left")
        year_spinbox.bind("<Return>", lambda event: self.apply_view())
        tk.Label(nav_frame, text="Month", bg="white").pack(side="left", padx=(8, 3))
        month_spinbox = tk.Spinbox(
            nav_frame, from_=1, to=12, width=4, textvariable=self.month_var,
            command=self.apply_view
        )
        month_spinbox.pack(side="left")
        month_spinbox.bind("<Return>", lambda event: self.apply_view())

        tk.Button(
            nav_frame, text="Clear month", **button_style,
            command=self.clear_month, bg="#e74c3c", fg="white"
        ).pack(side="right", padx=3)
        tk.Button(
            nav_frame, text="Export CSV", **button_style,
            command=self.export_csv, bg="#3498db", fg="white"
        ).pack(side="right", padx=3)

        tk.Label(
            grid_frame, text=f"Click a cell to mark an absence ({ABSENCE_MARKER})",
            font=("Arial", 9), fg="#7f8c8d", bg="white"
        ).pack(anchor="w")

        tree_frame = tk.Frame(grid_frame, bg="white")
        tree_frame.pack(fill="both", expand=True)

        self.grid_tree = ttk.Treeview(tree_frame, show="headings", height=16)
        x_scrollbar = ttk.Scrollbar(tree_frame, orient="horizontal", command=self.grid_tree.xview)
        self.grid_tree.configure(xscrollcommand=x_scrollbar.set)
        self.grid_tree.pack(side="top", fill="both", expand=True)
        x_scrollbar.pack(side="bottom", fill="x")
        self.grid_tree.bind("<Button-1>", self.on_grid_click)

        self.refresh()

    # ==================================================
    # state plumbing
    # ==================================================

    def commit(self, state):
        self.state = state
        if not save_state(self.state, self.state_file):
            messagebox.showerror("Error", "Failed to save attendance data.")
        self.refresh()

    def selected_student_id(self):
        selection = self.student_listbox.curselection()
        if not selection or selection[0] >= len(self.state.students):
            messagebox.showwarning("Notice", "Select a student first.")
            return None
        return self.state.students[selection[0]].id

    def refresh(self):
        self.refresh_roster()
        self.refresh_grid()

    def refresh_roster(self):
        self.student_listbox.delete(0, tk.END)
        for student in self.state.students:
            self.student_listbox.insert(
                tk.END,
                f"{student.name}  |  {student.total_fee}/{DEFAULT_FEE}  |  absences: {absence_count(student)}"
            )

    def refresh_grid(self):
        year, month = self.state.view.year, self.state.view.month
        self.month_label.config(text=month_key(year, month))
        self.year_var.set(year)
        self.month_var.set(month)

        days = days_in_month(year, month)
        columns = ["name"] + [str(d) for d in range(1, days + 1)] + ["total"]

        self.grid_tree.delete(*self.grid_tree.get_children())
        self.grid_tree["columns"] = columns
        self.grid_tree.heading("name", text="Name", anchor="w")
        self.grid_tree.column("name", width=140, anchor="w", stretch=False)
        for d in range(1, days + 1):
            self.grid_tree.heading(str(d), text=str(d), anchor="center")
            self.grid_tree.column(str(d), width=34, anchor="center", stretch=False)
        self.grid_tree.heading("total", text="Total", anchor="center")
        self.grid_tree.column("total", width=50, anchor="center", stretch=False)

        for student in self.state.students:
            marked = set(student_days(self.state, student.id, year, month))
            cells = [ABSENCE_MARKER if d in marked else "" for d in range(1, days + 1)]
            self.grid_tree.insert(
                "", "end", iid=student.id,
                values=[student.name] + cells + [absence_total(self.state, student.id, year, month)]
            )

    # ==================================================
    # roster actions
    # ==================================================

    def add_students(self):
        raw = self.name_entry.get()
        state = add_students(self.state, raw)
        self.name_entry.delete(0, tk.END)
        if state is not self.state:
            self.commit(state)

    def remove_student(self):
        student_id = self.selected_student_id()
        if student_id is None:
            return
        if messagebox.askyesno("Confirm", "Remove this student and all of their records?"):
            self.commit(remove_student(self.state, student_id))

    def mark_absence(self):
        student_id = self.selected_student_id()
        if student_id is None:
            return
        state, ok, message = mark_absence(self.state, student_id)
        if not ok:
            messagebox.showinfo("Notice", message)
            return
        self.commit(state)

    def export_spreadsheet(self):
        if not self.state.students:
            messagebox.showinfo("Notice", "There are no students to export.")
            return
        try:
            file_path = export_spreadsheet(self.state, self.records_folder)
            messagebox.showinfo("Done", f"Exported to:\n{file_path}")
        except Exception as e:
            logger.error("Spreadsheet export failed\n%s", traceback.format_exc())
            messagebox.showerror("Error", f"Export failed:\n{e}")

    # ==================================================
    # ledger actions
    # ==================================================

    def on_grid_click(self, event):
        if self.grid_tree.identify_region(event.x, event.y) != "cell":
            return
        student_id = self.grid_tree.identify_row(event.y)
        column = self.grid_tree.identify_column(event.x)
        if not student_id or not column:
            return

        # "#1" is the name column, days start at "#2"
        day = int(column.lstrip("#")) - 1
        year, month = self.state.view.year, self.state.view.month
        if 1 <= day <= days_in_month(year, month):
            self.commit(toggle_day(self.state, student_id, year, month, day))

    def previous_month(self):
        self.commit(go_previous_month(self.state))

    def next_month(self):
        self.commit(go_next_month(self.state))

    def apply_view(self):
        try:
            year, month = self.year_var.get(), self.month_var.get()
        except tk.TclError:
            return
        self.commit(set_view(self.state, year, month))

    def clear_month(self):
        year, month = self.state.view.year, self.state.view.month
        if messagebox.askyesno("Confirm", f"Clear all absences for {month_key(year, month)}?"):
            self.commit(clear_month(self.state, year, month))

    def export_csv(self):
        if not self.state.students:
            messagebox.showinfo("Notice", "There are no students to export.")
            return
        year, month = self.state.view.year, self.state.view.month
        try:
            file_path = export_csv(self.state, year, month, self.records_folder)
            messagebox.showinfo("Done", f"Exported to:\n{file_path}")
        except Exception as e:
            logger.error("CSV export failed\n%s", traceback.format_exc())
            messagebox.showerror("Error", f"Export failed:\n{e}")
