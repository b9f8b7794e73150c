from __future__ import annotations

import sys
import unittest
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[3]
SRC_ROOT = REPO_ROOT / "tools" / "icc_codegen" / "src"
if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))

from icc_codegen.config import NamespaceConfig
from icc_codegen.exports import (
    ICCLIB_FILES,
    STEP_LIBRARY_EXPORTS,
    Platform,
    build_export_families,
    render_export_family,
    render_export_file,
    step_files,
)


class ExportFamilyTests(unittest.TestCase):
    def setUp(self) -> None:
        self.families = build_export_families(NamespaceConfig())

    def test_internal_library_windows_definition(self) -> None:
        text = render_export_file(self.families["icclib"], Platform.WIN, ["Ignored"])
        self.assertEqual(text, "DESCRIPTION 'ICCLIB EXPORT FILE'\n\nEXPORTS\nN_lib_init\n")

    def test_fips_namespace_switches_lib_init(self) -> None:
        families = build_export_families(NamespaceConfig(prefix="C"))
        self.assertEqual(families["icclib"].fixed_exports, ("C_lib_init",))

    def test_step_linux_version_script_applies_exclusions(self) -> None:
        text = render_export_file(
            self.families["gskstep"],
            Platform.LINUX,
            ["Zebra", "OS_helpers"],
            exclusions=("OS_helpers",),
        )
        entries = "".join(f"    {name};\n" for name in STEP_LIBRARY_EXPORTS)
        self.assertEqual(
            text,
            "#DESCRIPTION 'GSKICCS EXPORT FILE'\n\nICCSTUB {\n  global:\n"
            + entries
            + "    ICC_Zebra;\n  local:\n    *;\n};",
        )

    def test_windows_extras_and_hp_version_symbol(self) -> None:
        family = self.families["gskstep"]
        win = family.export_names(Platform.WIN, ["Zebra"])
        self.assertIn("ICC_InitW", win)
        self.assertLess(win.index("ICC_InitW"), win.index("ICC_Zebra"))
        self.assertNotIn("ICC_InitW", family.export_names(Platform.LINUX, ["Zebra"]))

        hp = render_export_file(family, Platform.HP, ["Zebra"], version="8_9_1")
        self.assertTrue(hp.endswith("+e ICC_Zebra\n+e gskiccs8_loaded_from8_9_1\n"))

    def test_java_family_keeps_excluded_names(self) -> None:
        names = self.families["jgskstep"].export_names(Platform.AIX, ["OS_helpers"], exclusions=("OS_helpers",))
        self.assertEqual(names[-1], "JCC_OS_helpers")
        self.assertEqual(names[0], "JCC_Init")

    def test_old_layout_uses_its_own_node_and_directory(self) -> None:
        family = self.families["gskstep_old"]
        self.assertEqual(family.subdirectory, "exports_old")
        self.assertIn("GSKICCS {", render_export_file(family, Platform.SUN, []))

    def test_aux_aix_header_comes_first(self) -> None:
        text = render_export_file(self.families["aux"], Platform.AIX, ["Xerus"])
        self.assertEqual(
            text,
            "#!\n*DESCRIPTION 'ICC_AUX EXPORT FILE'\n\nICC_AUX_Init\nICC_AUX_Cleanup\nICC_Xerus\n",
        )

    def test_os400_and_zos_skeletons(self) -> None:
        os400 = render_export_file(self.families["aux"], Platform.OS400, ["Xerus"])
        self.assertTrue(os400.startswith('STRPGMEXP PGMLVL(*CURRENT) SIGNATURE("LIBICC_AUX")\n'))
        self.assertIn('EXPORT SYMBOL("ICC_Xerus")\n', os400)
        self.assertTrue(os400.endswith("ENDPGMEXP\n"))

        zos = render_export_file(self.families["icclib"], Platform.ZOS, [])
        self.assertIn('extern "C" {\n', zos)
        self.assertIn("#pragma export(N_lib_init)\n", zos)

    def test_os2_and_osx_prefix_underscores(self) -> None:
        os2 = render_export_file(self.families["icclib"], Platform.OS2, [])
        self.assertTrue(os2.startswith("LIBRARY         icclib  INITINSTANCE\n"))
        self.assertIn("\t_N_lib_init\n", os2)
        self.assertEqual(render_export_file(self.families["icclib"], Platform.OSX, []), "_N_lib_init\n")


class ExportFileSetTests(unittest.TestCase):
    def test_file_tables(self) -> None:
        self.assertEqual(len(ICCLIB_FILES), 9)
        files = step_files("iccstep")
        self.assertEqual(len(files), 16)
        self.assertIn(("iccstepwin64.def", Platform.WIN), files)
        self.assertIn(("iccstepZOS.h", Platform.ZOS), files)

    def test_platform_filter(self) -> None:
        family = build_export_families(NamespaceConfig())["gskstep"]
        rendered = render_export_family(family, ["Zebra"], platforms=[Platform.WIN])
        self.assertEqual([name for name, _ in rendered], ["iccstepwin.def", "iccstepwin64.def"])

        everything = render_export_family(family, ["Zebra"])
        self.assertEqual(len(everything), 16)


if __name__ == "__main__":
    unittest.main()
