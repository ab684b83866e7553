import customtkinter as ctk

from logpool import control

from wcsview.fits_viewer import FITSViewer
from wcsview.variables import colors, fonts


class Manager:
    def __init__(self, args=None):
        control.keep_in_memory = True
        control.simple_log = True
        control.callback = self.update_terminal

        self.args = args
        self.terminal_textbox = None

        ctk.set_appearance_mode("dark")
        self.root = ctk.CTk()
        self.root.geometry("1360x900")
        self.root.title("wcsview")

        self.init_mainframe()
        self.viewer = FITSViewer(self, self.root, self.args)
        self.setup_terminal()

        control.info("started wcsview")

        if args is not None and getattr(args, "file", None):
            self.viewer.load_fits(args.file, hdu=args.hdu)

    def start(self):
        self.root.mainloop()

    def init_mainframe(self):
        self.main_frame = ctk.CTkFrame(self.root, fg_color=colors.bg)
        self.main_frame.pack(fill="both", expand=True, padx=10, pady=10)

        # Content frame inside main_frame for UI elements
        self.content_frame = ctk.CTkFrame(self.main_frame, fg_color=colors.bg)
        self.content_frame.pack(side="left", fill="both", expand=True, padx=10, pady=10)

        selector_frame = ctk.CTkFrame(self.content_frame, fg_color=colors.bg)
        selector_frame.pack(side="top", padx=5, pady=10, fill="x")

        self.image_selector = ctk.CTkComboBox(
            selector_frame,
            height=30,
            width=400,
            fg_color=colors.bg,
            text_color=colors.text,
            font=fonts.md,
            command=self.change_active_image,
        )
        self.image_selector.configure(values=[])
        self.image_selector.set("Select Image")
        self.image_selector.pack(side="left", padx=5)

    def setup_terminal(self):
        self.terminal_frame = ctk.CTkFrame(self.viewer.bottoml_frame)
        self.terminal_frame.pack(side="left", expand=True, fill="both")
        # Terminal-like text box
        self.terminal_textbox = ctk.CTkTextbox(
            self.terminal_frame,
            fg_color="black",
            text_color=colors.text,
            width=400,
            font=fonts.sm,
        )
        self.terminal_textbox.pack(padx=10, expand=True, fill="both")

    def update_terminal(self, log_message):
        """Append a log line to the terminal text box."""
        if self.terminal_textbox is None:
            return
        self.terminal_textbox.insert("end", log_message + "\n")
        self.terminal_textbox.see("end")  # Auto-scroll to the latest line

    def update_image_list(self):
        names = list(self.viewer.images)
        self.image_selector.configure(values=names)
        if self.viewer.active_image is not None:
            self.image_selector.set(self.viewer.active_image)

    def change_active_image(self, event=None):
        """Change the active image based on the combobox selection."""
        self.viewer.change_active_image(self.image_selector.get())
        self.root.focus_set()
