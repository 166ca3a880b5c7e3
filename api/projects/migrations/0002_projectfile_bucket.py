# Generated manually for recording the object store bucket of each file

from django.db import migrations, models


def backfill_custom_uploads(apps, schema_editor):
    # Custom CSVs added after submission were stored in the custom files bucket
    ProjectFile = apps.get_model('projects', 'ProjectFile')
    ProjectFile.objects.filter(file_type='custom-csv', is_initial=False).update(bucket='projects')


class Migration(migrations.Migration):

    dependencies = [
        ('projects', '0001_initial'),
    ]

    operations = [
        migrations.AddField(
            model_name='projectfile',
            name='bucket',
            field=models.CharField(default='project-files', help_text='Object store bucket holding file_path', max_length=63),
        ),
        migrations.RunPython(backfill_custom_uploads, migrations.RunPython.noop),
    ]
