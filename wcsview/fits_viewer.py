import math
import os

import customtkinter as ctk

import tkinter as tk
from tkinter import filedialog

from PIL import ImageTk

from logpool import control

from wcsview.display import SCALE_MODES
from wcsview.image import FitsImage
from wcsview.mapping import Viewport
from wcsview.transform import HORIZONTAL, VERTICAL
from wcsview.variables import colors, fonts
from wcsview.viewer import InputSubscription, ViewerSession

ROSETTE_RADIUS = 35
ROSETTE_MARGIN = 20


class FITSViewer:
    def __init__(self, manager, root, args=None):
        self.manager = manager
        self.root = root
        self.args = args

        self.session = ViewerSession(scheduler=self.root)
        self.images = {}
        self.active_image = None
        self.tk_image = None

        self.setup_ui()

        self.input = InputSubscription(self.session, self.image_canvas, self.root)
        self.input.acquire()
        self.unsubscribers = [
            self.session.subscribe(lambda state: self.update_display_image()),
            self.session.subscribe(lambda state: self.update_orientation_controls()),
            self.session.subscribe_cursor(self.update_coordinates),
        ]

        self.image_canvas.bind("<Configure>", self.on_resize)
        self.root.protocol("WM_DELETE_WINDOW", self.close)
        self.update_orientation_controls()

    def setup_ui(self):
        self.main_frame = ctk.CTkFrame(self.manager.content_frame, fg_color=colors.bg)
        self.main_frame.pack(fill="both", expand=True)

        # File row
        file_frame = ctk.CTkFrame(self.main_frame, fg_color=colors.bg)
        file_frame.pack(fill="x", padx=10, pady=5)

        self.file_path_entry = ctk.CTkEntry(
            file_frame,
            width=40,
            fg_color=colors.bg,
            text_color=colors.text,
            font=fonts.md,
        )
        self.file_path_entry.pack(side="left", fill="x", expand=True, padx=5, pady=5)

        browse_button = ctk.CTkButton(
            file_frame,
            text="Browse FITS File",
            command=self.open_file_dialog,
            font=fonts.md,
            fg_color=colors.accent,
            text_color=colors.text,
        )
        browse_button.pack(side="right", padx=5, pady=5)

        self.hdu_numinput = ctk.CTkEntry(
            file_frame,
            width=40,
            fg_color=colors.bg,
            text_color=colors.text,
            font=fonts.md,
            placeholder_text="auto",
        )
        self.hdu_numinput.pack(side="right", padx=5, pady=5)

        ctk.CTkLabel(
            file_frame,
            text="HDU Number:",
            fg_color=colors.bg,
            text_color=colors.text,
            font=fonts.md,
        ).pack(side="right", padx=5, pady=5)

        # Display row: percentiles, scale mode, colormap
        input_frame = ctk.CTkFrame(self.main_frame, fg_color=colors.bg)
        input_frame.pack(fill="x", padx=10, pady=5)

        self.pmin_entry = self._labeled_entry(input_frame, "pmin:", "1")
        self.pmax_entry = self._labeled_entry(input_frame, "pmax:", "99.9")

        apply_button = ctk.CTkButton(
            input_frame,
            text="Apply",
            command=self.update_image_cache,
            font=fonts.md,
            fg_color=colors.accent,
            text_color=colors.text,
            width=80,
        )
        apply_button.pack(side="left", padx=10)

        self.scale_selector = ctk.CTkComboBox(
            input_frame,
            values=list(SCALE_MODES),
            command=self.change_scale_mode,
            font=fonts.md,
            width=110,
        )
        self.scale_selector.set("linear")
        self.scale_selector.pack(side="left", padx=5)

        self.cmap_selector = ctk.CTkComboBox(
            input_frame,
            values=["gray", "viridis", "magma", "inferno", "cividis"],
            command=self.change_colormap,
            font=fonts.md,
            width=110,
        )
        self.cmap_selector.set("gray")
        self.cmap_selector.pack(side="left", padx=5)

        self.reverse_var = tk.BooleanVar(value=False)
        ctk.CTkCheckBox(
            input_frame,
            text="Reverse",
            variable=self.reverse_var,
            command=self.toggle_reverse,
            font=fonts.md,
            text_color=colors.text,
        ).pack(side="left", padx=5)

        # Orientation row
        orient_frame = ctk.CTkFrame(self.main_frame, fg_color=colors.bg)
        orient_frame.pack(fill="x", padx=10, pady=5)

        self.flip_h_button = self._button(
            orient_frame, "Flip H", lambda: self.session.toggle_flip(HORIZONTAL)
        )
        self.flip_v_button = self._button(
            orient_frame, "Flip V", lambda: self.session.toggle_flip(VERTICAL)
        )
        self.lock_button = self._button(orient_frame, "Lock WCS", self.toggle_lock)
        self._button(orient_frame, "Reset", lambda: self.session.reset(keep_pan=False))

        self.rotation_entry = self._labeled_entry(orient_frame, "Rotation (from N):", "0")
        self._button(orient_frame, "Rotate", self.apply_rotation)

        # Canvas
        self.image_canvas = ctk.CTkCanvas(
            self.main_frame, width=500, height=500, bg="black", highlightthickness=0
        )
        self.image_canvas.pack(fill="both", expand=True, padx=10, pady=10)

        # Coordinate readout
        coord_frame = ctk.CTkFrame(self.main_frame, fg_color=colors.bg)
        coord_frame.pack(side="left", padx=10, pady=5)

        self.labels = {}
        for row, name in enumerate(["X", "Y", "Pixel", "Value", "RA", "Dec"]):
            label = ctk.CTkLabel(
                coord_frame, text=f"{name}:", text_color=colors.text, font=fonts.md
            )
            value = ctk.CTkLabel(
                coord_frame, text="N/A", text_color=colors.text, font=fonts.md
            )
            label.grid(row=row, column=0, padx=10, pady=1, sticky="w")
            value.grid(row=row, column=1, padx=10, pady=1, sticky="e")
            self.labels[name.lower()] = (label, value)

        copy_button = ctk.CTkButton(
            coord_frame,
            text="Copy RA DEC",
            command=self.copy_ra_dec_to_clipboard,
            font=fonts.md,
            fg_color=colors.accent,
            text_color=colors.text,
        )
        copy_button.grid(row=len(self.labels), column=0, columnspan=2, padx=10, pady=10)

        self.bottoml_frame = ctk.CTkFrame(self.main_frame, fg_color=colors.bg)
        self.bottoml_frame.pack(side="left", fill="both", expand=True, padx=10, pady=5)

    def _labeled_entry(self, master, text, default):
        ctk.CTkLabel(
            master, text=text, fg_color=colors.bg, text_color=colors.text, font=fonts.md
        ).pack(side="left", padx=5)
        entry = ctk.CTkEntry(
            master, width=60, fg_color=colors.bg, text_color=colors.text, font=fonts.md
        )
        entry.insert(0, default)
        entry.pack(side="left", padx=5)
        return entry

    def _button(self, master, text, command):
        button = ctk.CTkButton(
            master,
            text=text,
            command=command,
            font=fonts.md,
            fg_color=colors.blue,
            text_color=colors.text,
            width=90,
        )
        button.pack(side="left", padx=4)
        return button

    # ---- images ------------------------------------------------------------

    def open_file_dialog(self):
        file_path = filedialog.askopenfilename(
            filetypes=[("FITS file", ["*.fz", "*.fits", "*.fit"]), ("All files", "*.*")]
        )
        if file_path:
            self.file_path_entry.delete(0, tk.END)
            self.file_path_entry.insert(0, file_path)
            self.load_fits(file_path)

    def im_ref(self) -> FitsImage:
        if self.active_image is None:
            return None
        return self.images[self.active_image]

    def load_fits(self, file_path, hdu=None):
        if hdu is None:
            text = self.hdu_numinput.get().strip()
            hdu = int(text) if text.isdigit() else None

        image_name = os.path.basename(file_path)
        try:
            im = FitsImage.load(file_path, hdu_index=hdu, name=image_name)
        except (OSError, ValueError, IndexError) as e:
            control.warn(f"Error loading file: {e}")
            return None

        self.images[image_name] = im
        self.active_image = image_name
        self.manager.update_image_list()
        self.show_image(im)
        return im

    def show_image(self, im):
        self.session.load_image(im)
        self.reverse_var.set(im.reverse)
        self.update_display_image()
        self.update_orientation_controls()

    def change_active_image(self, name):
        if name in self.images:
            self.active_image = name
            self.show_image(self.images[name])

    def update_image_cache(self):
        if self.active_image is None:
            return
        self.im_ref().update_image_cache(self.pmin_entry.get(), self.pmax_entry.get())
        self.update_display_image()

    def change_scale_mode(self, mode):
        if self.active_image is None:
            return
        self.im_ref().set_scale_mode(mode)
        self.update_display_image()

    def change_colormap(self, name):
        if self.active_image is None:
            return
        self.im_ref().set_colormap(name)
        self.update_display_image()

    def toggle_reverse(self):
        if self.active_image is None:
            return
        im = self.im_ref()
        im.set_colormap(im.colormap, reverse=self.reverse_var.get())
        self.update_display_image()

    # ---- orientation -------------------------------------------------------

    def toggle_lock(self):
        self.session.lock()

    def apply_rotation(self):
        try:
            degrees = float(self.rotation_entry.get())
        except ValueError:
            control.warn("Rotation must be a number of degrees")
            return
        self.session.set_rotation_from_north(degrees)

    def update_orientation_controls(self):
        state = self.session.state
        locked = state.wcs_locked
        self.lock_button.configure(
            text="Unlock WCS" if locked else "Lock WCS",
            state="normal" if self.session.lock_available else "disabled",
        )
        suffix = " (WCS)" if locked else ""
        self.flip_h_button.configure(
            text=f"Flip H{suffix}",
            fg_color=colors.north if state.flip_horizontal else colors.blue,
        )
        self.flip_v_button.configure(
            text=f"Flip V{suffix}",
            fg_color=colors.north if state.flip_vertical else colors.blue,
        )

    # ---- drawing -----------------------------------------------------------

    def on_resize(self, event):
        self.session.set_viewport(Viewport(0, 0, event.width, event.height))
        self.update_display_image()

    def update_display_image(self):
        """Render the active image through the current transform."""
        self.image_canvas.delete("all")
        if self.active_image is None:
            return
        display_img = self.im_ref().update_display_image(
            self.session.viewport, self.session.state
        )
        # Keep reference to avoid garbage collection
        self.tk_image = ImageTk.PhotoImage(display_img)
        self.image_canvas.create_image(0, 0, anchor="nw", image=self.tk_image)
        self.draw_rosette()

    def draw_rosette(self):
        indicators = self.session.indicators()
        cx = ROSETTE_MARGIN + ROSETTE_RADIUS
        cy = self.session.viewport.height - ROSETTE_MARGIN - ROSETTE_RADIUS
        self.image_canvas.create_oval(
            cx - ROSETTE_RADIUS - 8,
            cy - ROSETTE_RADIUS - 8,
            cx + ROSETTE_RADIUS + 8,
            cy + ROSETTE_RADIUS + 8,
            fill=colors.dark,
            outline="",
        )
        arrows = [("X", indicators.x_angle, colors.axis), ("Y", indicators.y_angle, colors.axis)]
        if indicators.has_wcs:
            arrows += [
                ("N", indicators.north_angle, colors.north),
                ("E", indicators.east_angle, colors.north),
            ]
        for label, angle, color in arrows:
            self._arrow(cx, cy, angle, color, label)

    def _arrow(self, cx, cy, angle, color, label):
        dx = math.cos(math.radians(angle))
        dy = math.sin(math.radians(angle))
        x1 = cx + dx * ROSETTE_RADIUS * 0.75
        y1 = cy + dy * ROSETTE_RADIUS * 0.75
        self.image_canvas.create_line(cx, cy, x1, y1, fill=color, width=2, arrow="last")
        self.image_canvas.create_text(
            cx + dx * ROSETTE_RADIUS,
            cy + dy * ROSETTE_RADIUS,
            text=label,
            fill=color,
            font=fonts.sm,
        )

    # ---- coordinates -------------------------------------------------------

    def update_coordinates(self, cursor):
        values = dict.fromkeys(["x", "y", "pixel", "value", "ra", "dec"], "N/A")
        if cursor.is_in_bounds:
            values["x"] = f"{cursor.image_x:.2f}"
            values["y"] = f"{cursor.image_y:.2f}"
            values["pixel"] = f"{cursor.pixel_x}, {cursor.pixel_y}"
            if cursor.value is not None:
                values["value"] = f"{cursor.value:.4f}"
            if cursor.ra is not None:
                values["ra"] = f"{cursor.ra_sexagesimal}  {cursor.ra_decimal}"
                values["dec"] = f"{cursor.dec_sexagesimal}  {cursor.dec_decimal}"

        for key, text in values.items():
            self.labels[key][1].configure(text=text)

    def copy_ra_dec_to_clipboard(self):
        cursor = self.session.cursor
        if not cursor.ra_sexagesimal:
            control.warn("No coordinates under the cursor")
            return
        clipboard_text = f"{cursor.ra_sexagesimal} {cursor.dec_sexagesimal}"
        self.root.clipboard_clear()
        self.root.clipboard_append(clipboard_text)
        control.info(f"Copied to clipboard: {clipboard_text}")

    def close(self):
        for unsubscribe in self.unsubscribers:
            unsubscribe()
        self.unsubscribers = []
        self.input.release()
        self.session.close()
        self.root.destroy()
