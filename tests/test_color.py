# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Jeff Culverhouse
import pytest

from rgbw2mqtt.color import HSV, ColorMode, hsv_to_rgb, rgb_to_hsv, round_half_up


# ===========================================================================
# TestRgbToHsv
# ===========================================================================
class TestRgbToHsv:
    @pytest.mark.parametrize(
        "rgb, expected",
        [
            ([255, 0, 0], (0, 100, 100)),
            ([0, 255, 0], (120, 100, 100)),
            ([0, 0, 255], (240, 100, 100)),
            ([255, 255, 0], (60, 100, 100)),
            ([0, 255, 255], (180, 100, 100)),
            ([255, 0, 255], (300, 100, 100)),
        ],
    )
    def test_primaries_and_secondaries(self, rgb, expected) -> None:
        assert tuple(rgb_to_hsv(rgb)) == expected

    def test_black_is_all_zero(self) -> None:
        assert rgb_to_hsv([0, 0, 0]) == HSV(0, 0, 0)

    def test_white_has_no_hue_or_saturation(self) -> None:
        assert rgb_to_hsv([255, 255, 255]) == HSV(0, 0, 100)

    def test_gray_keeps_value(self) -> None:
        hsv = rgb_to_hsv([128, 128, 128])
        assert hsv.h == 0
        assert hsv.s == 0
        assert hsv.v == 50

    def test_red_sector_wraps_negative_hue(self) -> None:
        # red max with b > g lands just below 360
        hsv = rgb_to_hsv([255, 0, 10])
        assert hsv.h == 358
        assert hsv.s == 100

    def test_channels_are_clamped(self) -> None:
        assert rgb_to_hsv([300, -20, 0]) == rgb_to_hsv([255, 0, 0])

    def test_dim_color_value(self) -> None:
        hsv = rgb_to_hsv([0, 0, 128])
        assert hsv == HSV(240, 100, 50)

    @pytest.mark.parametrize(
        "rgb",
        [[1, 2, 3], [255, 1, 0], [12, 200, 99], [0, 0, 1], [250, 250, 249], [17, 0, 255]],
    )
    def test_ranges(self, rgb) -> None:
        h, s, v = rgb_to_hsv(rgb)
        assert 0 <= h < 360
        assert 0 <= s <= 100
        assert 0 <= v <= 100


# ===========================================================================
# TestHsvToRgb
# ===========================================================================
class TestHsvToRgb:
    @pytest.mark.parametrize(
        "h, expected",
        [
            (0, [255, 0, 0]),
            (60, [255, 255, 0]),
            (120, [0, 255, 0]),
            (180, [0, 255, 255]),
            (240, [0, 0, 255]),
            (300, [255, 0, 255]),
        ],
    )
    def test_full_saturation_sectors(self, h, expected) -> None:
        assert hsv_to_rgb(h, 100, 100) == expected

    def test_zero_saturation_is_white(self) -> None:
        assert hsv_to_rgb(200, 0, 100) == [255, 255, 255]

    def test_zero_value_is_black(self) -> None:
        assert hsv_to_rgb(123, 77, 0) == [0, 0, 0]

    def test_hue_wraps(self) -> None:
        assert hsv_to_rgb(360, 100, 100) == hsv_to_rgb(0, 100, 100)
        assert hsv_to_rgb(-120, 100, 100) == hsv_to_rgb(240, 100, 100)
        assert hsv_to_rgb(480, 100, 100) == hsv_to_rgb(120, 100, 100)

    def test_half_saturation(self) -> None:
        assert hsv_to_rgb(0, 50, 100) == [255, 128, 128]

    def test_out_of_range_saturation_and_value_are_clamped(self) -> None:
        assert hsv_to_rgb(0, 150, 120) == [255, 0, 0]

    @pytest.mark.parametrize("h", [0, 60, 120, 180, 240, 300, 359])
    @pytest.mark.parametrize("s", [0, 50, 100])
    def test_round_trip_within_one(self, h, s) -> None:
        back = rgb_to_hsv(hsv_to_rgb(h, s, 100))
        assert abs(back.s - s) <= 1
        if s > 0:
            # hue is circular; 359 may come back as 0
            diff = abs(back.h - h) % 360
            assert min(diff, 360 - diff) <= 1

    def test_channels_in_byte_range(self) -> None:
        for h in range(0, 360, 7):
            for channel in hsv_to_rgb(h, 73, 41):
                assert 0 <= channel <= 255


# ===========================================================================
# TestRounding
# ===========================================================================
class TestRounding:
    def test_half_rounds_up(self) -> None:
        assert round_half_up(0.5) == 1
        assert round_half_up(2.5) == 3
        assert round_half_up(127.5) == 128

    def test_negative_half_rounds_toward_positive(self) -> None:
        assert round_half_up(-0.5) == 0
        assert round_half_up(-1.5) == -1


class TestColorMode:
    def test_values(self) -> None:
        assert ColorMode("rgb") is ColorMode.RGB
        assert ColorMode.RGBW == "rgbw"
