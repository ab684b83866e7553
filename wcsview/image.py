import warnings

from astropy.io import fits
from astropy.wcs import WCS, FITSFixedWarning

import numpy as np

from logpool import control

from wcsview.alignment import solve_projection
from wcsview.display import build_lut, compute_stats, render_view, to_rgb
from wcsview.variables import display


class SkyProjection:
    """Pixel-to-sky capability backed by the celestial part of an astropy WCS.

    Pixel coordinates are 1-indexed (FITS / DS9 convention).
    """

    def __init__(self, wcs=None):
        self.wcs = wcs.celestial if wcs is not None else None

    @property
    def valid(self) -> bool:
        return self.wcs is not None and self.wcs.has_celestial

    @property
    def _lat_first(self):
        return self.wcs.wcs.lng == 1

    @property
    def linear_matrix(self):
        """2x2 linear part (CD, or PC scaled by CDELT), RA row first."""
        if not self.valid:
            return None
        matrix = np.array(self.wcs.pixel_scale_matrix, dtype=float)
        if self._lat_first:
            matrix = matrix[::-1]
        return matrix

    def pix2world(self, x, y):
        world = self.wcs.all_pix2world([[x, y]], 1)[0]
        if self._lat_first:
            world = world[::-1]
        return float(world[0]), float(world[1])

    @staticmethod
    def from_header(header):
        if header is None:
            return SkyProjection()
        try:
            with warnings.catch_warnings():
                warnings.simplefilter("ignore", FITSFixedWarning)
                wcs = WCS(header)
        except Exception as e:
            control.warn(f"Could not read WCS from header: {e}")
            return SkyProjection()
        return SkyProjection(wcs)


class FitsImage:

    def __init__(self, image_data, header=None, name=None):
        data = np.asarray(image_data)
        if data.ndim < 2:
            raise ValueError(f"{name or 'image'} has no 2D data")
        if data.ndim > 2:
            # cubes: show the first plane
            data = data[(0,) * (data.ndim - 2)]

        self.name = name
        self.image_data = data
        self.header = header

        self.projection = SkyProjection.from_header(header)
        self.alignment = solve_projection(self.projection)

        # Display settings, in raw data units
        self.stats = compute_stats(self.image_data)
        self.black = self.stats.black
        self.white = self.stats.white
        self.scale_mode = display.scale_mode
        self.colormap = display.colormap
        self.reverse = display.reverse

        self.cached_img_data = None

    @property
    def width(self) -> int:
        return self.image_data.shape[1]

    @property
    def height(self) -> int:
        return self.image_data.shape[0]

    @property
    def size(self):
        return self.width, self.height

    def sample(self, pixel_x, pixel_y):
        """Value at 0-indexed pixel (row ``pixel_y`` counted from the bottom)."""
        if not self.check_xy_image_bounds(pixel_x, pixel_y):
            return None
        return float(self.image_data[pixel_y, pixel_x])

    def check_xy_image_bounds(self, pixel_x, pixel_y):
        """Check if the given pixel indices are within the image bounds."""
        return 0 <= pixel_x < self.width and 0 <= pixel_y < self.height

    def update_image_cache(self, pmin=None, pmax=None):
        """Recompute black/white from percentiles and refresh the coloured cache."""
        try:
            pmin = display.low_percentile if pmin is None else float(pmin)
            pmax = display.high_percentile if pmax is None else float(pmax)
        except ValueError:
            control.warn("Invalid pmin or pmax value")
            return

        if pmin >= pmax:
            pmax = pmin + 1

        stats = compute_stats(self.image_data, pmin, pmax)
        self.set_levels(stats.black, stats.white)

    def set_levels(self, black, white):
        self.black = float(black)
        self.white = float(white)
        self.refresh_cache()

    def set_scale_mode(self, mode):
        self.scale_mode = mode
        self.refresh_cache()

    def set_colormap(self, name, reverse=None):
        self.colormap = name
        if reverse is not None:
            self.reverse = bool(reverse)
        self.refresh_cache()

    def refresh_cache(self):
        lut = build_lut(self.colormap, self.reverse)
        self.cached_img_data = to_rgb(
            self.image_data, self.black, self.white, self.scale_mode, lut
        )

    def update_display_image(self, viewport, state):
        """Render the image as seen through ``state`` into the viewport."""
        if self.cached_img_data is None:
            self.refresh_cache()
        return render_view(self.cached_img_data, viewport, state)

    @staticmethod
    def load_f_data(data, header, name=None):
        fits_image = FitsImage(data, header, name)
        fits_image.refresh_cache()

        return fits_image

    @staticmethod
    def load(file_path, hdu_index=None, name=None):
        """Load an image HDU; without ``hdu_index`` the first one holding 2D data."""
        with fits.open(file_path, memmap=False) as hdulist:
            if hdu_index is None:
                candidates = [
                    hdu for hdu in hdulist if hdu.data is not None and hdu.data.ndim >= 2
                ]
                if not candidates:
                    raise ValueError(f"No image data found in {file_path}")
                hdu = candidates[0]
            else:
                hdu = hdulist[hdu_index]
                if hdu.data is None:
                    raise ValueError(f"HDU {hdu_index} of {file_path} holds no data")

            data = np.array(hdu.data)
            header = hdu.header.copy()

        fits_image = FitsImage.load_f_data(data, header, name)
        control.info(
            f"Loaded {name or file_path}: {fits_image.width}x{fits_image.height}"
            f"{'' if fits_image.alignment else ' (no WCS)'}"
        )
        return fits_image
