import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from main import main, USAGE


class TestMain:
    def test_no_arguments_prints_usage(self, capsys):
        assert main([]) == 0

        captured = capsys.readouterr()
        assert USAGE in captured.err
        assert captured.out == ""

    def test_too_many_arguments_prints_usage(self, capsys):
        assert main(["a.csv", "b.csv"]) == 0
        assert USAGE in capsys.readouterr().err

    def test_missing_file_reported(self, tmp_path, capsys, caplog):
        with caplog.at_level("ERROR"):
            assert main([str(tmp_path / "missing.csv")]) == 0

        assert capsys.readouterr().out == ""
        assert "Could not read input file" in caplog.text

    def test_writes_accounts_csv(self, tmp_path, capsys):
        csv_file = tmp_path / "input.csv"
        csv_file.write_text('\n'.join([
            "type, client, tx, amount",
            "deposit, 2, 1, 3.1415",
            "deposit, 1, 2, 10.1234",
            "withdrawal, 1, 3, 5.1002",
            "dispute, 1, 3,",
            "chargeback, 1, 3,",
        ]))

        assert main([str(csv_file)]) == 0

        lines = capsys.readouterr().out.splitlines()
        assert lines == [
            "client,available,held,total,locked",
            "1,-0.077,0,-0.077,true",
            "2,3.1415,0,3.1415,false",
        ]

    def test_undecodable_row_skipped(self, tmp_path, capsys):
        csv_file = tmp_path / "input.csv"
        csv_file.write_bytes(b"type,client,tx,amount\ndeposit,1,1,5.0\ndeposit,2,2,\xff1.0\ndeposit,3,3,2.0\n")

        assert main([str(csv_file)]) == 0

        captured = capsys.readouterr()
        assert captured.out.splitlines() == [
            "client,available,held,total,locked",
            "1,5,0,5,false",
            "3,2,0,2,false",
        ]
        assert "Malformed: 1" in captured.err
