from __future__ import annotations

from dataclasses import MISSING, dataclass, field
import sys
from pathlib import Path

import surface_distance.cli as surface_distance_cli


@dataclass(frozen=True, slots=True)
class RunConfig:
    """main.py üzerinden çalıştırma ayarları.

    IDE'de `main.py` dosyasını "Program" olarak çalıştırırken pre/post
    karşılaştırmasının parametrelerini tek bir yerde kontrol edebilmeniz için var.

    Not: Buradaki alanlar, `python -m surface_distance compare ...` CLI argümanlarına çevrilir.
    """

    pre: str = field(
        default="pre.data",
        metadata={"help": "Değişiklik öncesi yükseklik verisi (raw uint8 veya GeoTIFF)."},
    )
    post: str = field(
        default="post.data",
        metadata={"help": "Değişiklik sonrası yükseklik verisi (raw uint8 veya GeoTIFF)."},
    )
    width: int = field(
        default=512,
        metadata={"help": "Görüntü genişliği (örnek sayısı). Raw veri için zorunlu."},
    )
    height: int = field(
        default=512,
        metadata={"help": "Görüntü yüksekliği (örnek sayısı). Raw veri için zorunlu."},
    )
    begin: tuple[int, int] = field(
        default=(1, 1),
        metadata={"help": "Yol başlangıç noktası (x, y)."},
    )
    end: tuple[int, int] = field(
        default=(511, 4),
        metadata={"help": "Yol bitiş noktası (x, y)."},
    )
    pixel_distance: float | None = field(
        default=30.0,
        metadata={"help": "Bir piksel adımının düzlemsel uzunluğu. None => raster çözünürlüğü / varsayılan."},
    )
    pixel_height: float | None = field(
        default=11.0,
        metadata={"help": "Bir yükseklik biriminin karşılığı. None => varsayılan."},
    )
    outdir: str | None = field(
        default=None,
        metadata={"help": "Çıktı klasörü (CSV/JSON/PNG). None => sadece konsola yazar."},
    )
    plots: bool = field(
        default=False,
        metadata={"help": "True ise profil grafiği üretir (outdir gerekir)."},
    )

    def validate(self) -> None:
        for name in ("pre", "post"):
            p = Path(getattr(self, name))
            if not p.exists():
                raise ValueError(f"{name} height data not found: {p}")
            if p.is_dir():
                raise ValueError(f"{name} must be a file, got directory: {p}")

        if int(self.width) < 1 or int(self.height) < 1:
            raise ValueError(f"width/height must be >= 1, got {self.width}x{self.height}")
        for name in ("begin", "end"):
            pt = getattr(self, name)
            if len(pt) != 2:
                raise ValueError(f"{name} must be an (x, y) pair, got {pt!r}")
            x, y = pt
            if not (0 <= int(x) < int(self.width) and 0 <= int(y) < int(self.height)):
                raise ValueError(f"{name}={tuple(pt)} is outside the image {self.width}x{self.height}")

        if self.pixel_distance is not None and float(self.pixel_distance) <= 0:
            raise ValueError("pixel_distance must be > 0")
        if self.pixel_height is not None and float(self.pixel_height) < 0:
            raise ValueError("pixel_height must be >= 0")

        if self.outdir is not None:
            outdir_path = Path(self.outdir)
            if outdir_path.exists() and not outdir_path.is_dir():
                raise ValueError(f"outdir must be a directory path, got file: {outdir_path}")
        if self.plots and self.outdir is None:
            raise ValueError("plots=True needs an outdir")

    def to_argv(self) -> list[str]:
        self.validate()

        argv: list[str] = [
            "compare",
            "--pre",
            self.pre,
            "--post",
            self.post,
            "--width",
            str(int(self.width)),
            "--height",
            str(int(self.height)),
            "--begin",
            *[str(int(v)) for v in self.begin],
            "--end",
            *[str(int(v)) for v in self.end],
        ]

        if self.pixel_distance is not None:
            argv.extend(["--pixel_distance", f"{float(self.pixel_distance):g}"])
        if self.pixel_height is not None:
            argv.extend(["--pixel_height", f"{float(self.pixel_height):g}"])
        if self.outdir is not None:
            argv.extend(["--outdir", self.outdir])
        if self.plots:
            argv.append("--plots")
        return argv


DEFAULT_RUN_CONFIG = RunConfig()


def _print_main_help() -> None:
    print("Usage:")
    print("  python main.py compare --pre <path> --post <path> --begin X Y --end X Y [--width W --height H]")
    print("  python main.py distance --heights <path> --begin X Y --end X Y [--width W --height H]")
    print("  python main.py              # DEFAULT_RUN_CONFIG ile (IDE için önerilir)")
    print("  python main.py --help")
    print("")
    print("RunConfig parametreleri (main.py içinden ayarlayabilirsiniz):")
    for f in RunConfig.__dataclass_fields__.values():  # type: ignore[attr-defined]
        help_text = (f.metadata or {}).get("help", "")
        if f.default is not MISSING:
            default_repr = f.default
        elif f.default_factory is not MISSING:
            default_repr = "<factory>"
        else:
            default_repr = None
        print(f"  - {f.name}: {help_text} (default: {default_repr})")


def main() -> int:
    argv = sys.argv[1:]
    if len(argv) == 1 and argv[0] in {"-h", "--help", "help"}:
        _print_main_help()
        return 0
    if argv:
        return int(surface_distance_cli.main(argv))

    try:
        return int(surface_distance_cli.main(DEFAULT_RUN_CONFIG.to_argv()))
    except ValueError as e:
        print(f"Invalid main.py defaults: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
