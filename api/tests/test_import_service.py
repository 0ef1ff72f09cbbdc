"""Tests for the import of published set identities."""

import csv
from datetime import datetime

import pytest

from conftest import add_component
from setbuilder.schemas.set_job import SetJobStatus
from setbuilder.services.errors import ImportFileError
from setbuilder.services.export_service import (
    COMPONENTS_EXPORT_HEADER,
    FURTHER_DATA_EXPORT_HEADER,
    merge_descriptions,
    merge_image_urls,
    timestamped_path,
)
from setbuilder.services.component_repository import ComponentRecord
from setbuilder.services.import_service import import_new_sets, read_import_file
from setbuilder.services.set_job_service import create_set_job


def write_import(path, rows, header=("ItemID", "MainVariantID", "FreeText17")):
    with open(path, "w", newline="", encoding="utf-8") as handle:
        writer = csv.writer(handle, delimiter=";")
        writer.writerow(header)
        writer.writerows(rows)
    return path


def read_rows(path):
    with open(path, newline="", encoding="utf-8") as handle:
        return list(csv.DictReader(handle, delimiter=";"))


@pytest.fixture
def waiting_job(test_db):
    add_component(
        test_db, 10, gross_min_price="119.00", weight_g=2000,
        image_urls="https://img/a.jpg, https://img/b.jpg",
        description_html="&lt;p&gt;Ofen&lt;/p&gt;",
        item_property_ids="5=Red;6=Steel",
    )
    add_component(
        test_db, 20, gross_min_price="59.50", weight_g=500,
        image_urls="https://img/c.jpg",
        description_html="<p>Feld</p>",
        variation_property_ids="5=Blue;7=Large",
    )
    job = create_set_job(test_db, 47, "423;476", [10, 20])
    job.status = SetJobStatus.WAITING_FOR_COMPONENTS
    job.barcode = "B-1"
    test_db.commit()
    return job


@pytest.fixture
def paths(tmp_path):
    return {
        "import_file": tmp_path / "import" / "neue_Sets.csv",
        "export_dir": str(tmp_path / "export"),
        "archive_dir": str(tmp_path / "import" / "archive"),
    }


def run(db, paths, **kwargs):
    return import_new_sets(
        db,
        import_file=str(paths["import_file"]),
        export_dir=paths["export_dir"],
        archive_dir=paths["archive_dir"],
        **kwargs,
    )


class TestImportNewSets:
    """Tests for import_new_sets."""

    def test_updates_waiting_job_and_writes_exports(self, test_db, waiting_job, paths):
        paths["import_file"].parent.mkdir(parents=True)
        write_import(paths["import_file"], [
            ["500", "600", str(waiting_job.id)],
            ["501", "", str(waiting_job.id)],
            ["502", "602", "999"],
            ["abc", "603", str(waiting_job.id)],
        ])

        report = run(test_db, paths)

        assert report.updated == [waiting_job.id]
        assert report.skipped == 3
        test_db.refresh(waiting_job)
        assert waiting_job.status == SetJobStatus.COMPONENTS_ADDED
        assert (waiting_job.new_item_id, waiting_job.new_variant_id) == (500, 600)

        components = read_rows(report.components_export_path)
        assert list(components[0]) == COMPONENTS_EXPORT_HEADER
        assert [row["ComponentVariantID"] for row in components] == ["10", "20"]
        assert [row["SortIndex"] for row in components] == ["0", "1"]
        assert components[0]["SetVariantID"] == "600"

        further = read_rows(report.further_data_export_path)
        assert list(further[0]) == FURTHER_DATA_EXPORT_HEADER
        row = further[0]
        assert row["SetItemID"] == "500"
        assert row["BruttoMindestpreisSet"] == "174.22"
        assert row["PropertyIds"] == "5;6;7"
        assert row["PropertyValues"] == ";Steel;Large"
        assert row["ImageUrls"] == "https://img/a.jpg,https://img/b.jpg,https://img/c.jpg"
        assert row["BeschreibungHTML"].startswith("<p>Ofen</p>\n<br><br>\n")
        assert row["RequestedByID"] == "47"
        assert row["SetUVP"] == ""

        assert not paths["import_file"].exists()
        assert report.archived_path.startswith(paths["archive_dir"])

    def test_missing_price_reported_not_fatal(self, test_db, paths):
        add_component(test_db, 10, gross_min_price="119.00")
        add_component(test_db, 20)
        job = create_set_job(test_db, 8, "423;476", [10, 20])
        job.status = SetJobStatus.WAITING_FOR_COMPONENTS
        test_db.commit()
        paths["import_file"].parent.mkdir(parents=True)
        write_import(paths["import_file"], [["500", "600", str(job.id)]])

        report = run(test_db, paths)

        assert report.updated == [job.id]
        assert len(report.price_diagnostics) == 1
        assert "20" in report.price_diagnostics[0]
        assert read_rows(report.further_data_export_path)[0]["BruttoMindestpreisSet"] == "0"

    def test_dry_run_rolls_back(self, test_db, waiting_job, paths):
        paths["import_file"].parent.mkdir(parents=True)
        write_import(paths["import_file"], [["500", "600", str(waiting_job.id)]])

        report = run(test_db, paths, dry_run=True)

        assert report.updated == [waiting_job.id]
        assert report.components_export_path is None
        assert report.archived_path is None
        assert paths["import_file"].exists()
        test_db.refresh(waiting_job)
        assert waiting_job.status == SetJobStatus.WAITING_FOR_COMPONENTS
        assert waiting_job.new_item_id is None

    def test_no_updates_writes_no_exports(self, test_db, paths):
        paths["import_file"].parent.mkdir(parents=True)
        write_import(paths["import_file"], [["500", "600", "1"]])

        report = run(test_db, paths)

        assert report.updated == []
        assert report.components_export_path is None
        assert report.archived_path is not None

    def test_missing_column(self, test_db, paths):
        paths["import_file"].parent.mkdir(parents=True)
        write_import(paths["import_file"], [["500", "600"]], header=("ItemID", "MainVariantID"))

        with pytest.raises(ImportFileError):
            run(test_db, paths)
        assert paths["import_file"].exists()

    def test_missing_file(self, tmp_path):
        with pytest.raises(ImportFileError):
            read_import_file(tmp_path / "missing.csv")


class TestExportHelpers:
    """Tests for export formatting helpers."""

    def test_timestamped_path(self):
        path = timestamped_path("export", "sets", datetime(2024, 3, 5, 9, 7, 1))
        assert path.name == "sets_2024-03-05_090701.csv"

    def test_empty_descriptions_skipped(self):
        components = [
            ComponentRecord(variant_id=1, description_html=""),
            ComponentRecord(variant_id=2, description_html="&amp;"),
        ]
        assert merge_descriptions(components) == "&\n<br><br>\n"

    def test_image_urls_trimmed(self):
        components = [
            ComponentRecord(variant_id=1, image_urls=" a , ,b"),
            ComponentRecord(variant_id=2),
        ]
        assert merge_image_urls(components) == "a,b"
