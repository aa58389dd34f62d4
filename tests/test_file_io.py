import unittest
import os
import json
import tempfile
import shutil
from otpmigrate.models.account import AccountRecord, OtpType
from otpmigrate.utils.file_io import read_json, write_json, save_accounts

class TestFileIO(unittest.TestCase):
    """Test cases for file I/O operations"""

    def setUp(self):
        """Set up test fixtures"""
        # Create a temporary directory for test files
        self.test_dir = tempfile.mkdtemp()
        self.test_file = os.path.join(self.test_dir, "test.json")

        # Sample data for testing
        self.test_data = {
            "qr_dir": "codes",
            "json_indent": 2,
        }
        self.accounts = [
            AccountRecord(secret=b"foobar", name="alice", issuer="GitHub",
                          otp_type=OtpType.TOTP).with_totp_secret(),
            AccountRecord(secret=b"\x01\x02", name="bob", otp_type=OtpType.HOTP,
                          counter=3).with_totp_secret(),
        ]

    def tearDown(self):
        """Tear down test fixtures"""
        # Remove the temporary directory and its contents
        shutil.rmtree(self.test_dir)

    def test_write_json(self):
        """Test writing JSON data to a file"""
        write_json(self.test_file, self.test_data)

        self.assertTrue(os.path.exists(self.test_file))
        with open(self.test_file, 'r') as file:
            self.assertEqual(json.load(file), self.test_data)

    def test_write_json_refuses_to_overwrite(self):
        write_json(self.test_file, self.test_data)

        with self.assertRaises(FileExistsError):
            write_json(self.test_file, {"other": True})
        self.assertEqual(read_json(self.test_file), self.test_data)

    def test_write_json_overwrite(self):
        write_json(self.test_file, self.test_data)
        write_json(self.test_file, {"other": True}, overwrite=True)

        self.assertEqual(read_json(self.test_file), {"other": True})

    def test_write_json_creates_directory(self):
        nested_file = os.path.join(self.test_dir, "a", "b", "out.json")

        write_json(nested_file, self.test_data)

        self.assertEqual(read_json(nested_file), self.test_data)

    def test_read_json(self):
        """Test reading JSON data from a file"""
        with open(self.test_file, 'w') as file:
            json.dump(self.test_data, file)

        self.assertEqual(read_json(self.test_file), self.test_data)

    def test_read_json_nonexistent_file(self):
        """Test reading from a nonexistent file"""
        nonexistent_file = os.path.join(self.test_dir, "nonexistent.json")

        self.assertEqual(read_json(nonexistent_file), {})

    def test_read_json_invalid_json(self):
        """Test reading from a file with invalid JSON"""
        with open(self.test_file, 'w') as file:
            file.write("This is not valid JSON")

        self.assertEqual(read_json(self.test_file), {})

    def test_read_json_not_an_object(self):
        with open(self.test_file, 'w') as file:
            json.dump([1, 2, 3], file)

        self.assertEqual(read_json(self.test_file), {})

    def test_save_accounts(self):
        """Accounts are saved as a list in their original order"""
        save_accounts(self.test_file, self.accounts)

        with open(self.test_file, 'r', encoding='utf-8') as file:
            saved = json.load(file)
        self.assertEqual([account["name"] for account in saved], ["alice", "bob"])
        self.assertEqual(saved[0]["totpSecret"], "MZXW6YTBOI======")
        self.assertEqual(saved[1]["counter"], "3")
        self.assertEqual(set(saved[0]), {
            "secret", "name", "issuer", "algorithm", "digits", "type", "counter", "totpSecret"
        })

    def test_save_accounts_indent(self):
        save_accounts(self.test_file, self.accounts, indent=4)

        with open(self.test_file, 'r', encoding='utf-8') as file:
            lines = file.read().splitlines()
        self.assertEqual(lines[0], "[")
        self.assertTrue(lines[2].startswith('        "secret"'))

    def test_save_accounts_refuses_to_overwrite(self):
        save_accounts(self.test_file, self.accounts)

        with self.assertRaises(FileExistsError):
            save_accounts(self.test_file, self.accounts[:1])

if __name__ == '__main__':
    unittest.main()
