from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable

from .config import NamespaceConfig


class Platform(str, Enum):
    AIX = "aix"
    SUN = "sun"
    HP = "hp"
    WIN = "win"
    LINUX = "linux"
    OS400 = "os400"
    ZOS = "zos"
    OSX = "osx"
    OS2 = "os2"


@dataclass(frozen=True)
class ExportSyntax:
    """Skeleton of one linker export file; header and entry are str.format templates."""

    header: str
    entry: str
    footer: str = ""


_VERSION_SCRIPT = ExportSyntax(
    header="#DESCRIPTION '{label}'\n\n{node} {{\n  global:\n",
    entry="    {name};\n",
    footer="  local:\n    *;\n};",
)

PLATFORM_SYNTAX: dict[Platform, ExportSyntax] = {
    Platform.WIN: ExportSyntax(header="DESCRIPTION '{label}'\n\nEXPORTS\n", entry="{name}\n"),
    Platform.AIX: ExportSyntax(header="#!\n*DESCRIPTION '{label}'\n\n", entry="{name}\n"),
    Platform.SUN: _VERSION_SCRIPT,
    Platform.LINUX: _VERSION_SCRIPT,
    Platform.HP: ExportSyntax(header="#DESCRIPTION '{label}'\n\n", entry="+e {name}\n"),
    Platform.OS2: ExportSyntax(
        header=(
            "LIBRARY         {library}  INITINSTANCE\n"
            "DATA NONSHARED\n\n"
            "DESCRIPTION     '{library_description}'\n\n"
            "EXPORTS\n"
        ),
        entry="\t_{name}\n",
    ),
    Platform.OSX: ExportSyntax(header="", entry="_{name}\n"),
    Platform.OS400: ExportSyntax(
        header='STRPGMEXP PGMLVL(*CURRENT) SIGNATURE("{signature}")\n',
        entry='EXPORT SYMBOL("{name}")\n',
        footer="ENDPGMEXP\n",
    ),
    Platform.ZOS: ExportSyntax(
        header=(
            "/* z/OS pragma's to control symbol visibility */\n\n"
            "#ifdef __cplusplus\n"
            'extern "C" {{\n'
            "#endif\n\n"
        ),
        entry="#pragma export({name})\n",
        footer="\n#ifdef __cplusplus\n};\n#endif\n",
    ),
}

STEP_FILE_SUFFIXES: tuple[tuple[str, Platform], ...] = (
    ("aix4.exp", Platform.AIX),
    ("sun64.exp", Platform.SUN),
    ("aix64.exp", Platform.AIX),
    ("sun64_x86.exp", Platform.SUN),
    ("hpux.exp", Platform.HP),
    ("sun_x86.exp", Platform.SUN),
    ("hpux64.exp", Platform.HP),
    ("win.def", Platform.WIN),
    ("hpux64_ia64_gcc.exp", Platform.HP),
    ("win64.def", Platform.WIN),
    ("hpux_ia64.exp", Platform.HP),
    ("linux.exp", Platform.LINUX),
    ("sun4-sol2.exp", Platform.SUN),
    ("OS400.exp", Platform.OS400),
    ("ZOS.h", Platform.ZOS),
    ("OSX.def", Platform.OSX),
)

ICCLIB_FILES: tuple[tuple[str, Platform], ...] = (
    ("icclib_win32.def", Platform.WIN),
    ("icclib_sun.exp", Platform.SUN),
    ("icclib_linux.exp", Platform.LINUX),
    ("icclib_aix.exp", Platform.AIX),
    ("icclib_hpux.exp", Platform.HP),
    ("icclib_os2.def", Platform.OS2),
    ("icclib_osx.def", Platform.OSX),
    ("icclib_os400.exp", Platform.OS400),
    ("icclib_zos.h", Platform.ZOS),
)

STEP_LIBRARY_EXPORTS = (
    "gskiccs_SCCSInfo",
    "gskiccs_Crypto_VersionInfo",
    "gskiccs_path",
    "gskiccs8_path",
    "ICC_Init",
    "Delta_T",
    "Delta_res",
    "Delta2Time",
    "Delta_spanT",
    "Delta_spanC",
    "ICC_MemCheck_start",
    "ICC_MemCheck_stop",
)
STEP_LIBRARY_WINDOWS_EXPORTS = ("ICC_InitW", "gskiccs8_pathW", "gskiccs_pathW")
JAVA_STEP_LIBRARY_EXPORTS = ("JCC_Init", "JCC_HKDF", "JCC_MemCheck_start", "JCC_MemCheck_stop")
JAVA_STEP_LIBRARY_WINDOWS_EXPORTS = ("JCC_InitW",)
AUX_LIBRARY_EXPORTS = ("AUX_Init", "AUX_Cleanup")


def step_files(stem: str) -> tuple[tuple[str, Platform], ...]:
    return tuple((f"{stem}{suffix}", platform) for suffix, platform in STEP_FILE_SUFFIXES)


@dataclass(frozen=True)
class ExportFamily:
    name: str
    layout_dir: str
    subdirectory: str
    files: tuple[tuple[str, Platform], ...]
    label: str
    node: str
    library: str
    library_description: str
    signature: str
    fixed_exports: tuple[str, ...]
    function_prefix: str = ""
    include_functions: bool = True
    applies_exclusions: bool = False
    windows_exports: tuple[str, ...] = ()
    hp_version_symbol: str = ""

    def export_names(
        self,
        platform: Platform,
        functions: Iterable[str],
        *,
        exclusions: Iterable[str] = (),
        version: str = "",
    ) -> list[str]:
        names = list(self.fixed_exports)
        if platform is Platform.WIN:
            names.extend(self.windows_exports)
        if self.include_functions:
            excluded = set(exclusions) if self.applies_exclusions else set()
            names.extend(f"{self.function_prefix}{name}" for name in functions if name not in excluded)
        if platform is Platform.HP and self.hp_version_symbol:
            names.append(f"{self.hp_version_symbol}{version}")
        return names


def build_export_families(namespace: NamespaceConfig) -> dict[str, ExportFamily]:
    families = [
        ExportFamily(
            name="icclib",
            layout_dir="icc_dir",
            subdirectory="exports",
            files=ICCLIB_FILES,
            label="ICCLIB EXPORT FILE",
            node="ICCLIB",
            library="icclib",
            library_description="ICC Shared Library",
            signature="LIBICCLIB",
            fixed_exports=(f"{namespace.lib_init_prefix}lib_init",),
            include_functions=False,
            hp_version_symbol="icclib085_loaded_from",
        ),
        ExportFamily(
            name="gskstep",
            layout_dir="iccpkg_dir",
            subdirectory="exports",
            files=step_files("iccstep"),
            label="GSKICCS EXPORT FILE",
            node="ICCSTUB",
            library="icclib",
            library_description="GSkit ICC Stub",
            signature="LIBICCLIB",
            fixed_exports=STEP_LIBRARY_EXPORTS,
            function_prefix="ICC_",
            applies_exclusions=True,
            windows_exports=STEP_LIBRARY_WINDOWS_EXPORTS,
            hp_version_symbol="gskiccs8_loaded_from",
        ),
        ExportFamily(
            name="gskstep_old",
            layout_dir="iccpkg_dir",
            subdirectory="exports_old",
            files=step_files("iccstep"),
            label="GSKICCS EXPORT FILE",
            node="GSKICCS",
            library="icclib",
            library_description="GSkit ICC Stub",
            signature="LIBICCLIB",
            fixed_exports=STEP_LIBRARY_EXPORTS,
            function_prefix="ICC_",
            applies_exclusions=True,
            windows_exports=STEP_LIBRARY_WINDOWS_EXPORTS,
            hp_version_symbol="gskiccs8_loaded_from",
        ),
        ExportFamily(
            name="jgskstep",
            layout_dir="iccpkg_dir",
            subdirectory="exports",
            files=step_files("jccstep"),
            label="GSKICCS EXPORT FILE",
            node="JGSKICCS",
            library="icclib",
            library_description="GSkit ICC Stub",
            signature="LIBICCLIB",
            fixed_exports=JAVA_STEP_LIBRARY_EXPORTS,
            function_prefix="JCC_",
            windows_exports=JAVA_STEP_LIBRARY_WINDOWS_EXPORTS,
            hp_version_symbol="jgskiccs8_loaded_from",
        ),
        ExportFamily(
            name="aux",
            layout_dir="iccpkg_dir",
            subdirectory="exports",
            files=step_files("iccaux"),
            label="ICC_AUX EXPORT FILE",
            node="OPENSSL",
            library="ICC_AUX",
            library_description="ICC Auxiliary Shared Library",
            signature="LIBICC_AUX",
            fixed_exports=tuple(f"ICC_{name}" for name in AUX_LIBRARY_EXPORTS),
            function_prefix="ICC_",
        ),
    ]
    return {family.name: family for family in families}


def render_export_file(
    family: ExportFamily,
    platform: Platform,
    functions: Iterable[str],
    *,
    exclusions: Iterable[str] = (),
    version: str = "",
) -> str:
    syntax = PLATFORM_SYNTAX[platform]
    parts = [
        syntax.header.format(
            label=family.label,
            node=family.node,
            library=family.library,
            library_description=family.library_description,
            signature=family.signature,
        )
    ]
    for name in family.export_names(platform, functions, exclusions=exclusions, version=version):
        parts.append(syntax.entry.format(name=name))
    parts.append(syntax.footer)
    return "".join(parts)


def render_export_family(
    family: ExportFamily,
    functions: list[str],
    *,
    exclusions: Iterable[str] = (),
    version: str = "",
    platforms: Iterable[Platform] | None = None,
) -> list[tuple[str, str]]:
    """Render every file of a family as (file name, content) pairs."""
    enabled = set(platforms) if platforms is not None else set(Platform)
    exclusions = tuple(exclusions)
    return [
        (file_name, render_export_file(family, platform, functions, exclusions=exclusions, version=version))
        for file_name, platform in family.files
        if platform in enabled
    ]
