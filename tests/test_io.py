"""Tests for the file side of a run: adapters, output writer, bib sheet
PDF and the command line."""

import csv
import logging
import os
import sys
import fitz  # PyMuPDF
import pytest

# Add project root to path
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, PROJECT_ROOT)

from bibassign.core.models import CompetitorRecord, HomeOrg, RaceDay
from bibassign.core.errors import LoadError, WriteError
from bibassign.core.output_writer import write_output
from bibassign.core.pdf_generator import generate_bib_sheet_pdf
from bibassign.adapters.loaner_adapter import LoanerAdapter
from bibassign.adapters.race_day_adapter import RaceDayAdapter
from bibassign.assign_bibs import main, parse_args

HEADER_1 = 'MAMRA Masters GS,Saturday,,,,,,,,,,,,'
HEADER_2 = 'NEMS Bib,MID Bib,USSA,FIS,First,Last,YOB,Gender,Team,Registered,USSA Member,NASTAR,Season Pass,Decision'
REGISTRATION_ROW = ('"12","123",E5123445,"","John","Smith","1900","M","Team",'
                    '"11/21/2021 19:49:11","Alpine Coach (w/ Official)Alpine Official",'
                    '"","Epic  Other.. ",')


def write_day(path, *rows):
    path.write_text('\n'.join([HEADER_1, HEADER_2, *rows]) + '\n', encoding='utf-8')
    return str(path)


def write_loaners(path, *bibs):
    lines = ['Slot,Bib'] + [f'{i + 1},{bib}' for i, bib in enumerate(bibs)]
    path.write_text('\n'.join(lines) + '\n', encoding='utf-8')
    return str(path)


def read_rows(path):
    with open(path, newline='', encoding='utf-8') as f:
        return list(csv.reader(f))


# ─── Race day adapter ───────────────────────────────────────────────

class TestRaceDayAdapter:
    def test_parse_registration_export(self, tmp_path):
        path = write_day(tmp_path / 'Day 1 GS.csv', REGISTRATION_ROW)
        day = RaceDayAdapter().parse(path)

        assert day.name == 'Day 1 GS'
        assert day.header_lines[0][0] == 'MAMRA Masters GS'
        assert day.header_lines[1][1] == 'MID Bib'
        assert len(day.records) == 1

        r = day.records[0]
        assert r.nems_bib == '12'
        assert r.mid_bib == '123'
        assert r.ussa == 'E5123445'
        assert r.first_name == 'John'
        assert r.last_name == 'Smith'
        assert r.season_pass == 'Epic  Other.. '
        assert r.decision == ''

    def test_blank_lines_are_ignored(self, tmp_path):
        path = write_day(tmp_path / 'day.csv', REGISTRATION_ROW, '', REGISTRATION_ROW)
        assert len(RaceDayAdapter().parse(path).records) == 2

    def test_short_row_rejected(self, tmp_path):
        path = write_day(tmp_path / 'day.csv', REGISTRATION_ROW, '1,2,3')
        with pytest.raises(LoadError) as exc:
            RaceDayAdapter().parse(path)
        assert exc.value.path == path
        assert 'line 4' in str(exc.value)

    def test_long_row_rejected(self, tmp_path):
        path = write_day(tmp_path / 'day.csv', REGISTRATION_ROW + ',extra')
        with pytest.raises(LoadError):
            RaceDayAdapter().parse(path)

    def test_missing_header_rows(self, tmp_path):
        path = tmp_path / 'day.csv'
        path.write_text(HEADER_1 + '\n', encoding='utf-8')
        with pytest.raises(LoadError):
            RaceDayAdapter().parse(str(path))

    def test_missing_file(self, tmp_path):
        with pytest.raises(LoadError):
            RaceDayAdapter().parse(str(tmp_path / 'nope.csv'))


# ─── Loaner adapter ─────────────────────────────────────────────────

class TestLoanerAdapter:
    def test_parse_in_file_order(self, tmp_path):
        path = write_loaners(tmp_path / 'loaners.csv', ' 903', '901 ', '902')
        assert LoanerAdapter().parse(path) == ['903', '901', '902']

    def test_column_order_and_case(self, tmp_path):
        path = tmp_path / 'loaners.csv'
        path.write_text('bib , slot\n901,A\n902,B\n', encoding='utf-8')
        assert LoanerAdapter().parse(str(path)) == ['901', '902']

    def test_blank_bibs_skipped(self, tmp_path):
        path = write_loaners(tmp_path / 'loaners.csv', '901', ' ', '902')
        assert LoanerAdapter().parse(path) == ['901', '902']

    def test_missing_bib_column(self, tmp_path):
        path = tmp_path / 'loaners.csv'
        path.write_text('Slot,Number\n1,901\n', encoding='utf-8')
        with pytest.raises(LoadError):
            LoanerAdapter().parse(str(path))

    def test_empty_file(self, tmp_path):
        path = tmp_path / 'loaners.csv'
        path.write_text('', encoding='utf-8')
        with pytest.raises(LoadError):
            LoanerAdapter().parse(str(path))


# ─── Output writer ──────────────────────────────────────────────────

def resolved_day(name):
    records = [
        CompetitorRecord(mid_bib='12', first_name='Ann', last_name='Lee', decision='Home'),
        CompetitorRecord(mid_bib='901', first_name='Bob', last_name='Ray', decision='Loaner'),
    ]
    return RaceDay(source_path=f'/in/{name}.csv',
                   header_lines=[['Race', name], ['NEMS Bib', 'MID Bib']],
                   records=records)


class TestOutputWriter:
    def test_writes_headers_then_records(self, tmp_path):
        out = tmp_path / 'out'
        written = write_output([resolved_day('Day 1')], str(out))

        assert written == [str(out / 'processed - Day 1.csv')]
        rows = read_rows(written[0])
        assert rows[0] == ['Race', 'Day 1']
        assert rows[1] == ['NEMS Bib', 'MID Bib']
        assert len(rows) == 4
        assert rows[2][1] == '12'
        assert rows[3][1] == '901'
        assert rows[3][-1] == 'Loaner'
        assert all(len(r) == 14 for r in rows[2:])

    def test_failed_day_does_not_stop_the_others(self, tmp_path):
        os.makedirs(tmp_path / 'processed - Day 1.csv')
        with pytest.raises(WriteError) as exc:
            write_output([resolved_day('Day 1'), resolved_day('Day 2')], str(tmp_path))
        assert [p for p, _ in exc.value.failures] == [str(tmp_path / 'processed - Day 1.csv')]
        assert (tmp_path / 'processed - Day 2.csv').is_file()


# ─── Bib sheet PDF ──────────────────────────────────────────────────

class TestBibSheetPdf:
    def test_lists_bibs_and_names(self, tmp_path):
        output = str(tmp_path / 'bib_sheet.pdf')
        generate_bib_sheet_pdf([resolved_day('Day 1')], HomeOrg.MID_ATLANTIC, output)
        doc = fitz.open(output)
        text = doc[0].get_text()
        doc.close()
        assert 'Day 1' in text
        assert 'Ann Lee' in text
        assert '901' in text

    def test_long_day_spans_pages(self, tmp_path):
        day = resolved_day('Day 1')
        day.records = [CompetitorRecord(mid_bib=str(i), first_name='R', last_name=str(i),
                                        decision='Home') for i in range(120)]
        output = str(tmp_path / 'bib_sheet.pdf')
        generate_bib_sheet_pdf([day], HomeOrg.MID_ATLANTIC, output)
        doc = fitz.open(output)
        assert doc.page_count >= 2
        doc.close()

    def test_empty_input_gives_blank_page(self, tmp_path):
        output = str(tmp_path / 'bib_sheet.pdf')
        generate_bib_sheet_pdf([], HomeOrg.MID_ATLANTIC, output)
        doc = fitz.open(output)
        assert doc.page_count == 1
        doc.close()

    def test_save_failure_raises_write_error(self, tmp_path):
        output = tmp_path / 'bib_sheet.pdf'
        os.makedirs(output)
        (output / 'keep').write_text('x')
        with pytest.raises(WriteError) as exc:
            generate_bib_sheet_pdf([resolved_day('Day 1')], HomeOrg.MID_ATLANTIC, str(output))
        assert [p for p, _ in exc.value.failures] == [str(output)]


# ─── Command line ───────────────────────────────────────────────────

class TestCommandLine:
    def test_parse_args(self):
        config = parse_args(['--home-org', 'new-england', '--loaners', 'l.csv',
                             '--race-days', 'a.csv', 'b.csv', '--output', 'out'])
        assert config.home_org is HomeOrg.NEW_ENGLAND
        assert config.race_day_paths == ['a.csv', 'b.csv']
        assert config.bib_sheet is False

    def test_full_run(self, tmp_path):
        loaners = write_loaners(tmp_path / 'loaners.csv', '901', '902')
        day1 = write_day(tmp_path / 'Day 1.csv',
                         '45,,E1,,Zoe,Cruz,1970,F,T,,,,,',
                         ',45,E2,,Hal,Ames,1968,M,T,,,,,')
        day2 = write_day(tmp_path / 'Day 2.csv',
                         ',,E1,,Zoe,Cruz,1970,F,T,,,,,')
        out = tmp_path / 'out'

        code = main(['--loaners', loaners, '--race-days', day1, day2,
                     '--output', str(out), '--bib-sheet'])

        assert code == 0
        rows1 = read_rows(out / 'processed - Day 1.csv')
        rows2 = read_rows(out / 'processed - Day 2.csv')
        assert rows1[2][1] == '901'
        assert rows1[2][-1] == 'Loaner - Conflict'
        assert rows1[3][1] == '45'
        assert rows1[3][-1] == 'Home'
        assert rows2[2][1] == '901'
        assert rows2[2][-1] == 'Existing Assignment'
        assert (out / 'bib_sheet.pdf').is_file()
        assert any(name.startswith('run-log-') for name in os.listdir(out))

    def test_pool_exhaustion_writes_nothing(self, tmp_path):
        loaners = write_loaners(tmp_path / 'loaners.csv')
        day1 = write_day(tmp_path / 'Day 1.csv', ',,E1,,Zoe,Cruz,1970,F,T,,,,,')
        out = tmp_path / 'out'

        code = main(['--loaners', loaners, '--race-days', day1, '--output', str(out)])

        assert code == 1
        assert not [n for n in os.listdir(out) if n.startswith('processed - ')]

    def test_bad_race_day_stops_before_resolution(self, tmp_path):
        loaners = write_loaners(tmp_path / 'loaners.csv', '901')
        good = write_day(tmp_path / 'Day 1.csv', ',,E1,,Zoe,Cruz,1970,F,T,,,,,')
        bad = write_day(tmp_path / 'Day 2.csv', ',,E1,Zoe')
        out = tmp_path / 'out'

        code = main(['--loaners', loaners, '--race-days', good, bad, '--output', str(out)])

        assert code == 1
        assert not [n for n in os.listdir(out) if n.startswith('processed - ')]

    def test_unwritable_bib_sheet_is_reported(self, tmp_path):
        loaners = write_loaners(tmp_path / 'loaners.csv', '901')
        day1 = write_day(tmp_path / 'Day 1.csv', ',,E1,,Zoe,Cruz,1970,F,T,,,,,')
        out = tmp_path / 'out'
        os.makedirs(out / 'bib_sheet.pdf')
        (out / 'bib_sheet.pdf' / 'keep').write_text('x')

        code = main(['--loaners', loaners, '--race-days', day1,
                     '--output', str(out), '--bib-sheet'])

        assert code == 1
        assert (out / 'processed - Day 1.csv').is_file()

    def test_output_location_is_a_file(self, tmp_path):
        loaners = write_loaners(tmp_path / 'loaners.csv', '901')
        day1 = write_day(tmp_path / 'Day 1.csv', ',,E1,,Zoe,Cruz,1970,F,T,,,,,')
        out = tmp_path / 'out'
        out.write_text('not a directory')

        code = main(['--loaners', loaners, '--race-days', day1, '--output', str(out)])

        assert code == 1
        assert out.read_text() == 'not a directory'

    def test_run_log_closed_after_run(self, tmp_path):
        loaners = write_loaners(tmp_path / 'loaners.csv', '901')
        day1 = write_day(tmp_path / 'Day 1.csv', ',,E1,,Zoe,Cruz,1970,F,T,,,,,')
        out = tmp_path / 'out'

        assert main(['--loaners', loaners, '--race-days', day1, '--output', str(out)]) == 0

        assert logging.getLogger('bibassign').handlers == []
        log_name = next(n for n in os.listdir(out) if n.startswith('run-log-'))
        assert "Doesn't have a bib, using loaner 901" in (out / log_name).read_text()
